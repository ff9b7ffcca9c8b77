"""Logging configuration."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from portfolio_tracker.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "portfolio_tracker.log"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 3

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("yfinance", "urllib3", "peewee")

_configured = False


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging once per process.

    Logs go to stdout; with `log_to_file` they are also written to a
    rotating file under `<data_dir>/logs`.
    """
    global _configured
    if _configured:
        return
    settings = settings or get_settings()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_to_file:
        log_dir = settings.get_data_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_dir / LOG_FILE_NAME,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    _configured = True
