"""Logging configuration helpers."""

import logging

LOG_FORMAT = "%(levelname)s: %(name)s: [session=%(session_id)s] %(message)s"
NO_SESSION = "-"


class SessionContextFilter(logging.Filter):
    """Give every record a ``session_id`` so the format never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "session_id", None):
            record.session_id = NO_SESSION
        return True


def configure_logging() -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("fodmap_helper")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.addFilter(SessionContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
