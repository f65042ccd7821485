"""Tests for JSON logging and request IDs."""

import json
import logging

from recipe_collector.core.request_id import RequestIdFilter, get_request_id, request_scope
from recipe_collector.utils.logging_config import JSONLogFormatter


def _record(msg="Recipe collected", **extra):
    record = logging.LogRecord("recipe_collector.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    """Test extra fields appear in the JSON line."""
    line = JSONLogFormatter().format(_record(title="红烧肉", ingredients=3))
    data = json.loads(line)

    assert data["message"] == "Recipe collected"
    assert data["severity"] == "INFO"
    assert data["logger"] == "recipe_collector.test"
    assert data["title"] == "红烧肉"
    assert data["ingredients"] == 3
    assert data["timestamp"].endswith("Z")


def test_json_formatter_stringifies_unknown_values():
    """Test values JSON cannot encode are stringified."""
    data = json.loads(JSONLogFormatter().format(_record(tags={"a"})))
    assert data["tags"] == "{'a'}"


def test_request_scope_sets_and_resets():
    """Test the request ID is set inside the scope only."""
    assert get_request_id() == ""
    with request_scope("abc") as request_id:
        assert request_id == "abc"
        record = _record()
        assert RequestIdFilter().filter(record)
        assert record.request_id == "abc"
    assert get_request_id() == ""


def test_nested_scope_keeps_outer_id():
    """Test nested scopes share the outer request ID."""
    with request_scope() as outer:
        assert len(outer) == 12
        with request_scope() as inner:
            assert inner == outer
        assert get_request_id() == outer


def test_filter_outside_scope_leaves_record_alone():
    """Test records outside a scope get no request ID."""
    record = _record()
    assert RequestIdFilter().filter(record)
    assert not hasattr(record, "request_id")
