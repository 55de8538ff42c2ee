import copy
import json

import pytest

CONFIG = {
    "participants": [
        {"name": "Alice", "email": "alice@example.com", "exclude": ["bob@example.com"]},
        {"name": "Bob", "email": "bob@example.com", "exclude": ["alice@example.com"]},
        {"name": "Carol", "email": "carol@example.com", "exclude": []},
        {"name": "Dave", "email": "dave@example.com"},
    ],
    "email": {
        "subject": "Gift for {recipient}",
        "message": "Hi {sender}, you give to {recipient} <{recipient_email}>.",
        "username": "santa@example.com",
        "password": "secret",
        "smtp_server": "smtp.example.com",
        "smtp_port": 465,
    },
}


@pytest.fixture
def config_data():
    return copy.deepcopy(CONFIG)


@pytest.fixture
def config_file(tmp_path, config_data):
    path = tmp_path / "santa.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")
    return path
