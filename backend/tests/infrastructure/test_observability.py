"""Structured Logging — JSON formatter output and setup idempotence."""

import json
import logging

from family_service.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "family_service.test", logging.WARNING, __file__, 1, "add_child failed", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_core_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "family_service.test"
    assert payload["message"] == "add_child failed"
    assert "timestamp" in payload


def test_json_formatter_surfaces_known_extras_only():
    payload = json.loads(JSONFormatter().format(_record(
        family_id="f1", operation="add_child", error_code="FAMILY_CHILD_EXISTS",
        duration_ms=3, unrelated="x",
    )))
    assert payload["family_id"] == "f1"
    assert payload["operation"] == "add_child"
    assert payload["error_code"] == "FAMILY_CHILD_EXISTS"
    assert payload["duration_ms"] == 3
    assert "unrelated" not in payload


def test_setup_logging_does_not_stack_handlers():
    before = list(logging.root.handlers)
    level = logging.root.level
    try:
        first = setup_logging("DEBUG", "json")
        second = setup_logging("INFO", "text")
        assert first not in logging.root.handlers
        assert second in logging.root.handlers
        assert logging.root.level == logging.INFO
    finally:
        logging.root.removeHandler(second)
        logging.root.handlers[:] = before
        logging.root.setLevel(level)
