"""Logging utilities for OpenMarket.

Modules log through :func:`get_logger`; the CLI calls
:func:`configure_logging` once at startup. Fields set with
:func:`log_context` (the feed store uses ``page`` and ``generation``) are
appended to every line logged inside that scope.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries whose INFO chatter (one line per HTTP request) is not wanted.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


class ContextualFormatter(logging.Formatter):
    """Formatter that appends ``[key=value ...]`` context fields to the message."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _log_context.get()
        if not fields:
            return super().format(record)
        original = record.msg
        suffix = " ".join(f"{key}={value}" for key, value in fields.items())
        record.msg = f"{original} [{suffix}]"
        try:
            return super().format(record)
        finally:
            # Other handlers may format the same record.
            record.msg = original


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Add context fields to all log messages inside the ``with`` block.

    Usage::

        with log_context(page=3, generation=1):
            logger.info("Requested page")  # "... Requested page [page=3 generation=1]"

    Fields merge with the enclosing context and are restored on exit. The
    context lives in a ContextVar, so an asyncio task keeps the fields of
    the scope it was created in.
    """
    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield
    finally:
        _log_context.reset(token)


_configured = False


def configure_logging(level: int = logging.INFO) -> None:
    """Install one stderr handler with the contextual formatter on the root logger.

    Only the first call has an effect.
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ContextualFormatter(DEFAULT_FORMAT))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically ``__name__``).

    Loggers carry no handlers of their own; output is decided by
    :func:`configure_logging`, or by the logging defaults when it was never
    called.
    """
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Log ``message: exc`` at ERROR level with the current traceback."""
    logger.exception("%s: %s", message, exc)
