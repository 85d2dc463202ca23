"""
Tests for the JSON log formatter.
"""

import json
import logging

from app.logging_config import CONTEXT_FIELDS, JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("app.services.temple_service", logging.INFO, __file__, 1, "Temple updated", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_fields_are_emitted():
    line = JSONFormatter().format(_record(temple_id="t-1", actor_id="a-1", public_id=None))
    payload = json.loads(line)

    assert payload["message"] == "Temple updated"
    assert payload["temple_id"] == "t-1"
    assert payload["actor_id"] == "a-1"
    assert "public_id" not in payload


def test_only_known_context_fields():
    assert CONTEXT_FIELDS == ("temple_id", "actor_id", "public_id")

    payload = json.loads(JSONFormatter().format(_record(operation="update")))
    assert "operation" not in payload
