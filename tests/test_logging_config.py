"""
Tests for structured logging.
"""
import json
import logging
import sys

from nutricare.core.logging_config import JSONFormatter, setup_logging


def _record(msg="Patient added", **extra):
    record = logging.LogRecord(
        name="nutricare.services.patient_store",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_structure():
    """Test the JSON log entry fields."""
    line = JSONFormatter().format(_record(patient_id="p1"))
    entry = json.loads(line)

    assert entry["level"] == "INFO"
    assert entry["logger"] == "nutricare.services.patient_store"
    assert entry["message"] == "Patient added"
    assert entry["timestamp"].endswith("Z")
    assert entry["extra"] == {"patient_id": "p1"}


def test_json_formatter_without_extra():
    """Test entries without extra fields omit the key."""
    entry = json.loads(JSONFormatter().format(_record()))
    assert "extra" not in entry


def test_json_formatter_is_single_line():
    """Test JSON entries are one line and keep non-ASCII text."""
    line = JSONFormatter().format(_record(msg="Paciente João"))
    assert "\n" not in line
    assert "João" in line


def test_json_formatter_includes_exception():
    """Test exceptions are included in the entry."""
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    entry = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in entry["exception"]


def test_setup_logging_text_format(monkeypatch):
    """Test text format and level are applied."""
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level="debug", json_format=False)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_setup_logging_env_override(monkeypatch):
    """Test environment variables override arguments."""
    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level="DEBUG", json_format=False)

        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
