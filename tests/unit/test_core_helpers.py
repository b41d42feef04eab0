"""Tests for ids, transient-error classification and log formatting."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, OperationalError

from blogai.core.exceptions import AIServiceError, PersistenceError
from blogai.core.ids import generate_id, new_request_id
from blogai.core.logging import JSONExtrasFormatter
from blogai.core.retry import is_transient_error, is_transient_message


def test_generate_id_format_and_uniqueness() -> None:
    ids = [generate_id() for _ in range(200)]

    assert len(ids) == len(set(ids))
    assert all(len(item) == 32 for item in ids)
    assert all(item.isalnum() and item == item.lower() for item in ids)


def test_new_request_id_uses_prefix() -> None:
    request_id = new_request_id("cat")

    assert request_id.startswith("cat-")
    assert request_id != new_request_id("cat")


def test_is_transient_message() -> None:
    assert is_transient_message("Request Timeout")
    assert is_transient_message("network unreachable")
    assert is_transient_message("upstream returned 503")
    assert not is_transient_message("Missing required field: metaTitle")


def test_is_transient_error_for_database_failures() -> None:
    dropped = OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))
    duplicate = IntegrityError("INSERT", {}, Exception("duplicate key value"))

    assert is_transient_error(dropped)
    assert not is_transient_error(duplicate)


def test_ai_service_error_retryable_follows_message() -> None:
    assert AIServiceError("Generative model request timeout").retryable is True
    assert AIServiceError("Generative model API key is invalid").retryable is False


def test_persistence_error_carries_explicit_retryable_flag() -> None:
    error = PersistenceError("Failed to apply categories", retryable=True)

    assert error.code == "PERSISTENCE_ERROR"
    assert error.retryable is True
    assert error.details == {}


def test_json_extras_formatter_appends_extras() -> None:
    record = logging.LogRecord("blogai.test", logging.INFO, __file__, 1, "Tags applied", None, None)
    record.post_id = "post-1"
    record.added = 2

    line = JSONExtrasFormatter().format(record)

    assert "| INFO     | blogai.test | Tags applied" in line
    assert line.endswith('{"post_id": "post-1", "added": 2}')
