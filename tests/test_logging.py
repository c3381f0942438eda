from __future__ import annotations

import json
import logging

from project_tracker_app.infrastructure.logging import APP_LOGGER_NAME, JsonFormatter, setup_app_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("project_tracker_app.test", logging.INFO, __file__, 1, "Project created. id=%s", (7,), None)
    record.event = "project_created"
    record.project_id = 7

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Project created. id=7"
    assert payload["level"] == "INFO"
    assert payload["event"] == "project_created"
    assert payload["project_id"] == 7
    assert "args" not in payload


def test_setup_app_logging_installs_single_handler(monkeypatch) -> None:
    monkeypatch.setenv("PTRACKER_LOG_LEVEL", "debug")
    monkeypatch.setenv("PTRACKER_LOG_JSON", "true")

    setup_app_logging(force=True)
    setup_app_logging(force=True)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    assert len(app_logger.handlers) == 1
    assert isinstance(app_logger.handlers[0].formatter, JsonFormatter)
    assert app_logger.level == logging.DEBUG
    assert app_logger.propagate is False
