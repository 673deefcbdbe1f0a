from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for the importer.

Every line is "<LABEL> <message>" with LABEL one of INFO, WARN, ERROR or
SUMMARY (DEBUG with --debug). The final SUMMARY line is machine-parsed, so the
format carries no timestamp or logger name.

Module loggers (logging.getLogger(__name__)) are children of
"inscripciones_import" and write through its single handler. Per-item import
errors are also kept as JSON Lines by inscripciones_import.logging.error_log.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "set_debug",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "inscripciones_import"

# between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_app_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Renders "<LABEL> <message>", plus the traceback on following lines when present."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{LABELS.get(record.levelno, record.levelname)} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Attach the labeled console handler to the application logger.

    Idempotent: later calls return the already configured logger untouched.
    stream defaults to the current sys.stdout.
    """
    global _app_logger
    if _app_logger is not None:
        return _app_logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    app = logging.getLogger(LOGGER_NAME)
    for stale in list(app.handlers):
        app.removeHandler(stale)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(LabeledFormatter())
    handler.setLevel(level)
    app.addHandler(handler)
    app.setLevel(level)
    # the root logger must not print the same record a second time
    app.propagate = False

    _app_logger = app
    return app


def get_logger() -> logging.Logger:
    return _app_logger if _app_logger is not None else setup_logging()


def set_debug() -> None:
    """Lower the application logger and its handler to DEBUG."""
    app = get_logger()
    app.setLevel(logging.DEBUG)
    for handler in app.handlers:
        handler.setLevel(logging.DEBUG)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger; the next setup_logging() rebuilds the handler (tests)."""
    global _app_logger
    _app_logger = None
