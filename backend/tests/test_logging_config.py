"""
Tests for logging configuration
"""
import json
import logging

import pytest

from addressbook.core.logging_config import (ContextualFormatter,
                                             LoggingConfig,
                                             SensitiveDataFilter,
                                             request_context)


def _record(msg, *args, **extra):
    record = logging.LogRecord("addressbook.test", logging.INFO, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clean_context():
    LoggingConfig.clear_context()
    yield
    LoggingConfig.clear_context()


@pytest.mark.parametrize("message,secret", [
    ('login with password="hunter22"', "hunter22"),
    ("token=abc123", "abc123"),
    ("Authorization: Bearer abc.def.ghi", "abc.def.ghi"),
])
def test_sensitive_data_is_masked(message, secret):
    record = _record(message)

    assert SensitiveDataFilter().filter(record) is True
    assert secret not in record.getMessage()


def test_masking_can_be_disabled():
    record = _record("token=abc123")

    SensitiveDataFilter(enabled=False).filter(record)

    assert "abc123" in record.getMessage()


def test_string_args_are_masked():
    record = _record("header %s", "Bearer abc123")

    SensitiveDataFilter().filter(record)

    assert "abc123" not in record.getMessage()


def test_json_formatter_merges_context_and_extra():
    LoggingConfig.set_context(request_id="req-1", user_id="u-1")
    record = _record("Created contact", contact_id="c-1")

    line = json.loads(ContextualFormatter().format(record))

    assert line["message"] == "Created contact"
    assert line["level"] == "INFO"
    assert line["request_id"] == "req-1"
    assert line["user_id"] == "u-1"
    assert line["contact_id"] == "c-1"


def test_context_is_cleared():
    LoggingConfig.set_context(request_id="req-1")
    LoggingConfig.clear_context()

    assert request_context.get() == {}


def test_set_module_level():
    LoggingConfig.set_module_level("addressbook.test_module", "DEBUG")

    assert logging.getLogger("addressbook.test_module").level == logging.DEBUG


def test_metrics_count_by_level():
    LoggingConfig.reset_metrics()
    logger = LoggingConfig.get_logger("addressbook.test_metrics")

    logger.warning("first")
    logger.error("second")

    metrics = LoggingConfig.get_metrics()
    assert metrics["WARNING"] >= 1
    assert metrics["ERROR"] >= 1
