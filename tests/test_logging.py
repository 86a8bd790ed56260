"""Tests for logging helpers."""

import logging

import pytest
import structlog

from builders import document, element
from llm_dom_serializer.core.logging import get_logger, log_iframe_issues, setup_logging
from llm_dom_serializer.dom.serializer import DOMTreeSerializer


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("llm_dom_serializer").setLevel(logging.NOTSET)
    structlog.reset_defaults()


def test_setup_logging_writes_file(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "serializer.log"

    logger = setup_logging("DEBUG", str(log_file))
    logger.debug("file logging ready")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert "file logging ready" in log_file.read_text(encoding="utf-8")


def test_get_logger_respects_stdlib_level(caplog):
    with caplog.at_level(logging.WARNING, logger="llm_dom_serializer"):
        logger = get_logger("llm_dom_serializer.test")
        logger.debug("hidden")
        logger.warning("shown")

    messages = [record.getMessage() for record in caplog.records]
    assert not any("hidden" in m for m in messages)
    assert any("shown" in m for m in messages)


def test_iframe_issues_logged_once(caplog):
    with caplog.at_level(logging.WARNING, logger="llm_dom_serializer"):
        log_iframe_issues(["first failure", "second failure"])
        log_iframe_issues([])

    assert len(caplog.records) == 1
    message = caplog.records[0].getMessage()
    assert "first failure" in message
    assert "second failure" in message


def test_serialization_logged_at_debug(caplog):
    root = document([element(1, "button", bounds=(0, 0, 50, 20))])

    with caplog.at_level(logging.DEBUG, logger="llm_dom_serializer"):
        DOMTreeSerializer().serialize(root)

    assert any("DOM serialized" in record.getMessage() for record in caplog.records)
