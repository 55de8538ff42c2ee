from __future__ import annotations

import datetime
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import format_datetime, formataddr
from typing import Optional, Sequence

from loguru import logger

from santa.core.errors import NotificationError
from santa.services.arcs import Arc
from santa.services.roster import EmailSettings, Participant, SantaConfig

SEPARATOR = "-" * 60
SENDER_NAME = "Santa Claus"


@dataclass(frozen=True)
class RenderedMessage:
    to: str
    subject: str
    body: str


def render_message(settings: EmailSettings, sender: Participant, recipient: Participant) -> RenderedMessage:
    subject = settings.subject.replace("{recipient}", recipient.name)
    body = (
        settings.message.replace("{sender}", sender.name)
        .replace("{recipient_email}", recipient.email)
        .replace("{recipient}", recipient.name)
    )
    return RenderedMessage(to=sender.email, subject=subject, body=body)


def build_email(
    settings: EmailSettings,
    rendered: RenderedMessage,
    now: Optional[datetime.datetime] = None,
) -> EmailMessage:
    message = EmailMessage()
    message["Date"] = format_datetime(now or datetime.datetime.now(datetime.timezone.utc))
    message["From"] = formataddr((SENDER_NAME, settings.username))
    message["To"] = rendered.to
    message["Subject"] = rendered.subject
    message.set_content(rendered.body + "\n")
    return message


def print_message(sender: Participant, rendered: RenderedMessage) -> None:
    print(SEPARATOR)
    print(f"Message to {sender.name} ({sender.email})")
    print(f"Subject: {rendered.subject}")
    print(rendered.body)
    print(SEPARATOR)


def send_matchings(config: SantaConfig, assignment: Sequence[Arc], send: bool = False) -> int:
    """Tell every giver who they are buying for.

    With ``send`` off the messages are printed instead of delivered.
    Returns the number of messages handled.
    """
    pairs = [(config.participant(giver), config.participant(recipient)) for giver, recipient in assignment]
    rendered = [(sender, render_message(config.email, sender, recipient)) for sender, recipient in pairs]

    if not send:
        for sender, message in rendered:
            print_message(sender, message)
        logger.info("Dry run: printed {count} messages", count=len(rendered))
        return len(rendered)

    settings = config.email
    log = logger.bind(server=settings.smtp_server, port=settings.smtp_port)
    try:
        with smtplib.SMTP_SSL(
            settings.smtp_server, settings.smtp_port, context=ssl.create_default_context()
        ) as session:
            session.login(settings.username, settings.password)
            for sender, message in rendered:
                session.send_message(build_email(settings, message))
                log.bind(to=sender.email).debug("Message sent")
    except (smtplib.SMTPException, OSError) as exc:
        log.exception("Failed to deliver assignments: {error}", error=str(exc))
        raise NotificationError(f"Failed to deliver assignments: {exc}") from exc

    log.info("Sent {count} messages", count=len(rendered))
    return len(rendered)
