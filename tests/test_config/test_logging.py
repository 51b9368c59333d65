"""Testes abrangentes para config.logging.

Cobre: configure_logging, get_logger, log_suppressed_failure,
ContextFilter, create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    ContextFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_suppressed_failure,
)
from config.logging.config import VALID_LOG_LEVELS
from config.settings import DEFAULT_SERVICE_NAME


def _record(msg: str = "msg", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestConfigureLogging:
    """Testes para configure_logging."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("INFO", logging.INFO),
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ],
    )
    def test_configure_logging_sets_root_level(self, level: str, expected: int) -> None:
        configure_logging(level=level)
        assert logging.getLogger().level == expected

    def test_configure_logging_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1

    def test_configure_logging_installs_context_filter(self) -> None:
        configure_logging(
            correlation_id_getter=lambda: "corr",
            instance_id_getter=lambda: "inst",
        )
        handler = logging.getLogger().handlers[0]
        assert any(isinstance(f, ContextFilter) for f in handler.filters)

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "pyloto-instances"


class TestGetLogger:
    """Testes para get_logger."""

    def test_get_logger_returns_same_named_logger(self) -> None:
        logger = get_logger("test.module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test.module"
        assert get_logger("test.module") is logger


class TestLogSuppressedFailure:
    """Testes para log_suppressed_failure."""

    def test_logs_warning_with_component_and_error_type(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_suppressed_failure(logger, "adapter_terminate", RuntimeError("boom"))

        logger.warning.assert_called_once()
        args, kwargs = logger.warning.call_args
        assert args == ("Failure suppressed in %s", "adapter_terminate")
        extra = kwargs["extra"]
        assert extra["suppressed"] is True
        assert extra["component"] == "adapter_terminate"
        assert extra["error_type"] == "RuntimeError"
        assert extra["error"] == "boom"

    def test_extra_context_is_merged(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_suppressed_failure(logger, "pairing_console", ValueError("x"), instance_id="i-1")
        extra = logger.warning.call_args[1]["extra"]
        assert extra["instance_id"] == "i-1"


class TestContextFilter:
    """Testes para ContextFilter."""

    def test_filter_adds_context_from_getters(self) -> None:
        filter_ = ContextFilter("my_service", lambda: "corr-123", lambda: "inst-9")
        record = _record()

        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.instance_id == "inst-9"
        assert record.service == "my_service"

    def test_filter_preserves_explicit_values(self) -> None:
        filter_ = ContextFilter("svc", lambda: "from-getter", lambda: "from-getter")
        record = _record()
        record.correlation_id = "explicit-id"
        record.instance_id = "explicit-instance"

        filter_.filter(record)
        assert record.correlation_id == "explicit-id"
        assert record.instance_id == "explicit-instance"

    def test_filter_uses_empty_string_without_getters(self) -> None:
        filter_ = ContextFilter("service_name")
        record = _record(level=logging.ERROR)

        assert filter_.filter(record) is True
        assert record.correlation_id == ""
        assert record.instance_id == ""


class TestCreateJsonFormatter:
    """Testes para create_json_formatter e constantes."""

    def test_required_fields_and_rename_map(self) -> None:
        assert "instance_id" in REQUIRED_LOG_FIELDS
        assert "correlation_id" in REQUIRED_LOG_FIELDS
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_formatter_emits_json_with_renamed_fields(self) -> None:
        from pythonjsonlogger.json import JsonFormatter

        formatter = create_json_formatter()
        assert isinstance(formatter, JsonFormatter)

        record = _record("instance_state_changed")
        record.correlation_id = "abc-123"
        record.instance_id = "inst-1"
        record.service = "test_service"
        record.to_state = "CONNECTED"

        payload = json.loads(formatter.format(record))
        assert payload["message"] == "instance_state_changed"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "test"
        assert payload["instance_id"] == "inst-1"
        assert payload["to_state"] == "CONNECTED"


class TestLoggingIntegration:
    """Testes de integração do sistema de logging."""

    def test_full_logging_flow(self) -> None:
        configure_logging(
            level="DEBUG",
            service_name="integration_test",
            correlation_id_getter=lambda: "int-test-001",
        )
        logger = get_logger("integration.test")
        logger.debug("Debug message", extra={"custom_field": "value"})
        logger.info("instance_created", extra={"instance_id": "abc"})
        logger.warning("Warning message")
