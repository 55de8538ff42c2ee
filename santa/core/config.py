import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    config_path: str
    send_emails: bool
    seed: Optional[int]
    smtp_password: Optional[str]
    log_level: str
    log_path: str


def load_settings() -> Settings:
    config_path = os.getenv("SANTA_CONFIG_PATH", "santa.json")
    send_emails = os.getenv("SANTA_SEND_EMAILS", "false").strip().lower() in _TRUTHY
    raw_seed = os.getenv("SANTA_SEED")
    smtp_password = os.getenv("SANTA_SMTP_PASSWORD") or None
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/secret_santa.log")

    seed = None
    if raw_seed:
        try:
            seed = int(raw_seed)
        except ValueError:
            raise ValueError(f"SANTA_SEED must be an integer, got {raw_seed!r}.") from None

    return Settings(
        config_path=config_path,
        send_emails=send_emails,
        seed=seed,
        smtp_password=smtp_password,
        log_level=log_level,
        log_path=log_path,
    )
