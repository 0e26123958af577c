"""Tests for structured logging and the diagnostics handle."""

import json
import logging
import pytest

from multicat.core.logging_config import (
    DIAGNOSTICS_LOGGER_NAME,
    CorrelationIdFilter,
    DiagnosticsLogger,
    StructuredJsonFormatter,
    correlation_id_var,
    setup_diagnostics,
)


@pytest.mark.unit
class TestDiagnosticsLogger:
    def test_disabled_emits_nothing(self, caplog):
        diagnostics = DiagnosticsLogger(enabled=False)

        with caplog.at_level(logging.INFO, logger=DIAGNOSTICS_LOGGER_NAME):
            diagnostics.log_event("multicat.test", "Should not appear.")

        assert caplog.records == []

    def test_enabled_appends_context_as_json(self, caplog):
        diagnostics = DiagnosticsLogger(enabled=True)

        with caplog.at_level(logging.INFO, logger=DIAGNOSTICS_LOGGER_NAME):
            diagnostics.log_event(
                "multicat.associations.write_failed",
                "Failed to persist additional categories.",
                level=logging.ERROR,
                content_id=12,
                error="boom",
            )

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.event_type == "multicat.associations.write_failed"
        assert record.getMessage() == (
            'Failed to persist additional categories. {"content_id": 12, "error": "boom"}'
        )

    def test_unserializable_context_falls_back_to_repr(self, caplog):
        diagnostics = DiagnosticsLogger(enabled=True)

        with caplog.at_level(logging.INFO, logger=DIAGNOSTICS_LOGGER_NAME):
            diagnostics.log_event("multicat.test", "Odd context.", value=object())

        assert "Odd context. {'value': <object object" in caplog.records[-1].getMessage()

    def test_file_handler_attached_once(self, tmp_path):
        log_file = tmp_path / "multicat.log"

        first = setup_diagnostics(True, str(log_file))
        setup_diagnostics(True, str(log_file))
        first.log_event("multicat.test", "Written to file.", content_id=1)

        handlers = [
            handler
            for handler in first.logger.handlers
            if isinstance(handler, logging.FileHandler)
        ]
        try:
            assert len(handlers) == 1
            handlers[0].flush()
            assert 'Written to file. {"content_id": 1}' in log_file.read_text()
        finally:
            for handler in handlers:
                first.logger.removeHandler(handler)
                handler.close()

    def test_disabled_setup_adds_no_file(self, tmp_path):
        log_file = tmp_path / "multicat.log"

        diagnostics = setup_diagnostics(False, str(log_file))

        assert diagnostics.enabled is False
        assert not log_file.exists()


@pytest.mark.unit
class TestStructuredJsonFormatter:
    def test_record_includes_correlation_id(self):
        token = correlation_id_var.set("abc-123")
        try:
            record = logging.LogRecord(
                "multicat.test", logging.INFO, __file__, 10, "hello", None, None
            )
            CorrelationIdFilter().filter(record)
            payload = json.loads(StructuredJsonFormatter("%(message)s").format(record))
        finally:
            correlation_id_var.reset(token)

        assert payload["message"] == "hello"
        assert payload["level"] == "INFO"
        assert payload["correlation_id"] == "abc-123"
        assert payload["source"]["line"] == 10
