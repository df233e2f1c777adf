"""Structured Logging: tests for the JSON formatter and setup.

Tests:
    - base fields always present
    - relation extras surfaced only when set
    - setup_logging installs a handler with the requested formatter
    - configure_logging takes level and format from COMPOSITE_LOG_* settings
"""

import json
import logging

from composite_relations.config import Settings
from composite_relations.infrastructure.observability import (
    JSONFormatter, configure_logging, setup_logging,
)


def _record(**extra):
    record = logging.LogRecord(
        "composite_relations.relations.eager", logging.INFO, __file__, 1,
        "Eager loaded 'meters'", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_base_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "composite_relations.relations.eager"
    assert payload["message"] == "Eager loaded 'meters'"
    assert "relation" not in payload


def test_json_formatter_surfaces_relation_extras():
    payload = json.loads(JSONFormatter().format(
        _record(relation="meters", table="meters", parents=3, results=4),
    ))
    assert payload["relation"] == "meters"
    assert payload["parents"] == 3
    assert payload["results"] == 4


def test_setup_logging_text_format():
    handler = setup_logging("debug", fmt="text")
    try:
        assert logging.root.level == logging.DEBUG
        assert not isinstance(handler.formatter, JSONFormatter)
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(logging.WARNING)


def test_setup_logging_json_format():
    handler = setup_logging("INFO")
    try:
        assert isinstance(handler.formatter, JSONFormatter)
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(logging.WARNING)


def test_configure_logging_reads_settings(monkeypatch):
    monkeypatch.setenv("COMPOSITE_LOG_LEVEL", "debug")
    monkeypatch.setenv("COMPOSITE_LOG_FORMAT", "text")
    handler = configure_logging()
    try:
        assert logging.root.level == logging.DEBUG
        assert logging.getLogger("composite_relations").level == logging.DEBUG
        assert not isinstance(handler.formatter, JSONFormatter)
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(logging.WARNING)
        logging.getLogger("composite_relations").setLevel(logging.NOTSET)


def test_configure_logging_explicit_settings_default_to_json():
    handler = configure_logging(Settings(_env_file=None, log_level="WARNING"))
    try:
        assert isinstance(handler.formatter, JSONFormatter)
        assert logging.getLogger("composite_relations").level == logging.WARNING
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(logging.WARNING)
        logging.getLogger("composite_relations").setLevel(logging.NOTSET)
