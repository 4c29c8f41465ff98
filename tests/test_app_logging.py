"""Tests for logging configuration."""

import io
import logging

from fodmap_helper.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("fodmap_helper")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_log_lines_carry_session_id() -> None:
    logger = logging.getLogger("fodmap_helper")
    logger.handlers.clear()
    configure_logging()
    stream = io.StringIO()
    logger.handlers[0].setStream(stream)

    child = logging.getLogger("fodmap_helper.services.chat")
    child.warning("Chat stream aborted", extra={"session_id": "s-42"})
    child.info("Loaded 5 FODMAP foods")

    lines = stream.getvalue().splitlines()
    assert lines == [
        "WARNING: fodmap_helper.services.chat: [session=s-42] Chat stream aborted",
        "INFO: fodmap_helper.services.chat: [session=-] Loaded 5 FODMAP foods",
    ]
