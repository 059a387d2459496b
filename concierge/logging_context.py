"""Widget session ID on every log record.

The turn runner and script executor set the session ID at the start of a
turn. ``SessionIdFilter`` copies it onto each record: ``concierge.config``
attaches the filter to the root handlers, whose format prints
``[%(session_id)s]``, so module loggers need nothing extra. Records
emitted outside a turn show ``NO_SESSION``.

Usage:
    from concierge.logging_context import get_session_logger, set_session_id

    set_session_id("sess-abc123")
    logger = get_session_logger(__name__)
    logger.info("Running script")  # ... [sess-abc123] INFO: Running script
"""

import logging
from contextvars import ContextVar

_session_id: ContextVar[str] = ContextVar("session_id", default="NO_SESSION")


def set_session_id(session_id: str) -> None:
    """Bind ``session_id`` to the current turn's async context."""
    _session_id.set(session_id)


def get_session_id() -> str:
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger that stamps ``session_id`` itself.

    Scripts use this so the attribute is present even when records reach
    handlers other than the root ones configured at startup (pytest's
    ``caplog``, for instance).
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
