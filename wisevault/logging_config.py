"""
Structured Logging Configuration Module

Ledger operations log one JSON object per line. Besides the message, a line
carries who acted (``user_id``), what they did (``action``), which account or
loan it touched (``resource``, e.g. ``"account:1001"``) and any ``extra``
payload such as a validation error's details.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

from .config import get_config


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

LEDGER_FIELDS = ("user_id", "action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """Renders a record and its ledger fields as a JSON line"""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        for name in LEDGER_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: Optional[str] = None, logger_name: str = "wisevault",
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Point a ledger logger at stderr, replacing any handler set up earlier.

    Args:
        level: Log level name; defaults to the configured log_level
        logger_name: Logger to configure; child loggers such as
            "wisevault.directory" inherit it
        log_format: "json" or "text"; defaults to the configured log_format
    """
    settings = get_config()

    handler = logging.StreamHandler()
    if (log_format or settings.log_format) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger = logging.getLogger(logger_name)
    logger.handlers[:] = [handler]
    logger.setLevel((level or settings.log_level).upper())
    logger.propagate = False
    return logger


def get_logger(name: str = "wisevault") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               user_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, extra: Optional[dict] = None):
    """Log ``message`` at ``level`` with whichever ledger fields are set"""
    fields = dict(zip(LEDGER_FIELDS, (user_id, action, resource, extra)))
    logger.log(getattr(logging, level.upper()), message,
               extra={name: value for name, value in fields.items() if value})
