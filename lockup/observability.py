"""Logging setup: JSON lines in production, plain text for local runs.

Service log calls pass ledger context through ``extra`` (account, record id,
amount, error code). Both formats surface those fields when present.
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = ("account", "record_id", "amount", "error_code", "path")

# Marks the handler this module owns so repeated setup reuses it.
HANDLER_NAME = "lockup"


def ledger_context(record: logging.LogRecord) -> dict:
    return {key: record.__dict__[key] for key in EXTRA_FIELDS if record.__dict__.get(key) is not None}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **ledger_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = ledger_context(record)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or reconfigure) the lockup handler on the root logger.

    Safe to call on every app start: an existing lockup handler is reused
    rather than stacked.
    """
    root = logging.getLogger()
    handler = next((h for h in root.handlers if h.get_name() == HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        root.addHandler(handler)

    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
