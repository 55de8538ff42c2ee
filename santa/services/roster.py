from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from loguru import logger

from santa.core.errors import ConfigurationError


@dataclass(frozen=True)
class Participant:
    email: str
    name: str
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EmailSettings:
    subject: str
    message: str
    username: str
    password: str
    smtp_server: str
    smtp_port: int


@dataclass(frozen=True)
class SantaConfig:
    participants: Tuple[Participant, ...]
    email: EmailSettings

    @property
    def identities(self) -> List[str]:
        return [participant.email for participant in self.participants]

    def participant(self, email: str) -> Participant:
        for participant in self.participants:
            if participant.email == email:
                return participant
        raise KeyError(email)


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{where}: '{key}' must be a non-empty string.")
    return value


def _parse_participant(raw: Any, index: int) -> Participant:
    where = f"participants[{index}]"
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{where}: expected an object.")

    exclude = raw.get("exclude", [])
    if not isinstance(exclude, list) or not all(isinstance(item, str) for item in exclude):
        raise ConfigurationError(f"{where}: 'exclude' must be a list of email addresses.")

    return Participant(
        email=_require_str(raw, "email", where).strip(),
        name=_require_str(raw, "name", where),
        exclude=tuple(item.strip() for item in exclude),
    )


def _parse_email(raw: Any) -> EmailSettings:
    if not isinstance(raw, Mapping):
        raise ConfigurationError("'email' section is required.")

    port = raw.get("smtp_port")
    try:
        smtp_port = int(port)
    except (TypeError, ValueError):
        raise ConfigurationError(f"email: 'smtp_port' must be an integer, got {port!r}.") from None

    password = raw.get("password", "")
    if not isinstance(password, str):
        raise ConfigurationError("email: 'password' must be a string.")

    return EmailSettings(
        subject=_require_str(raw, "subject", "email"),
        message=_require_str(raw, "message", "email"),
        username=_require_str(raw, "username", "email"),
        password=password,
        smtp_server=_require_str(raw, "smtp_server", "email"),
        smtp_port=smtp_port,
    )


def parse_config(data: Any) -> SantaConfig:
    """Validate a decoded configuration document.

    Identities must be unique and every exclusion must name a known
    participant. A participant excluding themselves is accepted since
    self-arcs are never generated anyway.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("Configuration root must be an object.")

    raw_participants = data.get("participants")
    if not isinstance(raw_participants, list):
        raise ConfigurationError("'participants' must be a list.")

    participants = [_parse_participant(raw, index) for index, raw in enumerate(raw_participants)]

    seen: Dict[str, int] = {}
    for index, participant in enumerate(participants):
        if participant.email in seen:
            raise ConfigurationError(
                f"participants[{index}]: duplicate email {participant.email!r} "
                f"(also participants[{seen[participant.email]}])."
            )
        seen[participant.email] = index

    for participant in participants:
        unknown = [email for email in participant.exclude if email not in seen]
        if unknown:
            raise ConfigurationError(
                f"{participant.email}: excludes unknown participants {', '.join(unknown)}."
            )

    return SantaConfig(participants=tuple(participants), email=_parse_email(data.get("email")))


def load_config(path: str | Path, smtp_password: Optional[str] = None) -> SantaConfig:
    config_path = Path(path)
    try:
        with config_path.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {exc}") from exc

    config = parse_config(data)
    if smtp_password:
        config = replace(config, email=replace(config.email, password=smtp_password))

    logger.bind(path=str(config_path)).info(
        "Loaded {count} participants", count=len(config.participants)
    )
    return config
