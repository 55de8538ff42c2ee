import datetime
import smtplib

import pytest

from santa.core.errors import NotificationError
from santa.services import notify
from santa.services.roster import parse_config


class FakeSMTP:
    instances = []

    def __init__(self, host, port, context=None, fail_on_send=False):
        self.host = host
        self.port = port
        self.login_args = None
        self.sent = []
        self.closed = False
        self.fail_on_send = fail_on_send
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def login(self, username, password):
        self.login_args = (username, password)

    def send_message(self, message):
        if self.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"no such user")})
        self.sent.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(notify.smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def test_render_message_substitutes_placeholders(config_data):
    config = parse_config(config_data)
    alice = config.participant("alice@example.com")
    carol = config.participant("carol@example.com")
    rendered = notify.render_message(config.email, alice, carol)
    assert rendered.to == "alice@example.com"
    assert rendered.subject == "Gift for Carol"
    assert rendered.body == "Hi Alice, you give to Carol <carol@example.com>."


def test_build_email_headers(config_data):
    config = parse_config(config_data)
    rendered = notify.RenderedMessage(to="bob@example.com", subject="Hello", body="Body")
    now = datetime.datetime(2024, 12, 1, 9, 30, tzinfo=datetime.timezone.utc)
    message = notify.build_email(config.email, rendered, now=now)
    assert message["From"] == "Santa Claus <santa@example.com>"
    assert message["To"] == "bob@example.com"
    assert message["Subject"] == "Hello"
    assert message["Date"] == "Sun, 01 Dec 2024 09:30:00 +0000"
    assert message.get_content().strip() == "Body"


def test_send_matchings_dry_run_prints(config_data, capsys, fake_smtp):
    config = parse_config(config_data)
    assignment = [("alice@example.com", "carol@example.com"), ("carol@example.com", "alice@example.com")]
    assert notify.send_matchings(config, assignment) == 2
    out = capsys.readouterr().out
    assert "Message to Alice (alice@example.com)" in out
    assert "Subject: Gift for Alice" in out
    assert fake_smtp.instances == []


def test_send_matchings_delivers_over_ssl(config_data, fake_smtp):
    config = parse_config(config_data)
    assignment = [
        ("alice@example.com", "carol@example.com"),
        ("carol@example.com", "bob@example.com"),
        ("bob@example.com", "dave@example.com"),
        ("dave@example.com", "alice@example.com"),
    ]
    assert notify.send_matchings(config, assignment, send=True) == 4

    (session,) = fake_smtp.instances
    assert (session.host, session.port) == ("smtp.example.com", 465)
    assert session.login_args == ("santa@example.com", "secret")
    assert [message["To"] for message in session.sent] == [giver for giver, _ in assignment]
    assert session.closed


def test_send_matchings_wraps_smtp_errors(config_data, monkeypatch):
    monkeypatch.setattr(
        notify.smtplib,
        "SMTP_SSL",
        lambda host, port, context=None: FakeSMTP(host, port, context, fail_on_send=True),
    )
    config = parse_config(config_data)
    with pytest.raises(NotificationError):
        notify.send_matchings(config, [("alice@example.com", "carol@example.com")], send=True)


def test_send_matchings_unknown_identity(config_data):
    config = parse_config(config_data)
    with pytest.raises(KeyError):
        notify.send_matchings(config, [("ghost@example.com", "alice@example.com")])
