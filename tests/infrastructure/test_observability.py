"""Observability — verifies the JSON log formatter and logging setup.

Tests cover:
    - JSON output includes known extra fields only
    - Exceptions are serialized
    - setup_logging is idempotent (one root handler)
"""

import json
import logging
import sys

from rihigo_web.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord("rihigo.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_known_extras():
    line = JSONFormatter().format(_record(endpoint="/api/me", status_code=200, secret="x"))
    data = json.loads(line)
    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["endpoint"] == "/api/me"
    assert data["status_code"] == 200
    assert "secret" not in data


def test_json_formatter_serializes_exceptions():
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord("t", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
    data = json.loads(JSONFormatter().format(record))
    assert "ValueError: bad" in data["exception"]


def test_setup_logging_is_idempotent():
    setup_logging("DEBUG", "json")
    setup_logging("WARNING", "text")
    named = [h for h in logging.root.handlers if h.get_name() == "rihigo-root"]
    assert len(named) == 1
    assert logging.root.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    for handler in named:
        logging.root.removeHandler(handler)
