from __future__ import annotations

import sys

from loguru import logger

from santa.core.config import load_settings
from santa.core.errors import SantaError
from santa.core.logging import setup_logging
from santa.services import run


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path)

    args = sys.argv[1:] if argv is None else argv
    config_path = args[0] if args else settings.config_path

    logger.info("Secret Santa draw starting...")
    logger.info("Config  - {path}", path=config_path)
    logger.info("Mode    - {mode}", mode="send" if settings.send_emails else "dry run")

    try:
        run(
            config_path,
            send=settings.send_emails,
            seed=settings.seed,
            smtp_password=settings.smtp_password,
        )
    except SantaError as exc:
        logger.error("Secret Santa draw failed: {error}", error=str(exc))
        return 1

    logger.info("Secret Santa draw finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
