"""Structured Logging - verifies JSON formatting of log records and extras."""

import json
import logging

from worktrack.infrastructure.observability import (
    JSONFormatter, TextFormatter, setup_logging,
)


def _record(**extra):
    record = logging.LogRecord(
        "worktrack.test", logging.INFO, __file__, 1, "Updated %s", ("item",), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_core_keys():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "worktrack.test"
    assert payload["message"] == "Updated item"
    assert "timestamp" in payload


def test_json_formatter_surfaces_known_extras_only():
    payload = json.loads(JSONFormatter().format(
        _record(work_item_id=7, version=3, unrelated="x"),
    ))
    assert payload["work_item_id"] == 7
    assert payload["version"] == 3
    assert "unrelated" not in payload


def test_setup_logging_text_format():
    previous_level = logging.root.level
    handler = setup_logging("debug", "text")
    try:
        assert isinstance(handler.formatter, TextFormatter)
        assert logging.root.level == logging.DEBUG
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(previous_level)


def test_text_formatter_appends_context():
    line = TextFormatter().format(_record(work_item_id=7, type_name="system.bug"))
    assert "Updated item" in line
    assert line.endswith("work_item_id=7 type_name=system.bug")
