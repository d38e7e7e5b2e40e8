"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import structlog

from shelfbrowse.config.settings import ObservabilitySettings
from shelfbrowse.observability.logging import get_logger, setup_logging


def _last_json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[-1])


class TestSetupLogging:
    def test_json_event_carries_context(self, capsys) -> None:
        setup_logging(ObservabilitySettings(log_level="info", log_format="json"))
        structlog.contextvars.bind_contextvars(request_id="abcd1234")
        try:
            get_logger("shelfbrowse.test").info("Solr ping", status="OK")
        finally:
            structlog.contextvars.clear_contextvars()

        event = _last_json_line(capsys.readouterr().out)
        assert event["event"] == "Solr ping"
        assert event["status"] == "OK"
        assert event["request_id"] == "abcd1234"
        assert event["service"] == "shelfbrowse"
        assert event["level"] == "info"
        assert event["logger"] == "shelfbrowse.test"

    def test_level_filters_events(self, capsys) -> None:
        setup_logging(ObservabilitySettings(log_level="warning", log_format="json"))
        get_logger("shelfbrowse.test").info("hidden")
        assert "hidden" not in capsys.readouterr().out

    def test_http_client_logs_quieted(self) -> None:
        setup_logging(ObservabilitySettings(log_level="debug", log_format="console"))
        assert logging.getLogger("httpx").level == logging.WARNING
