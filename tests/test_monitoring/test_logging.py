"""
Tests for structured logging helpers.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
import structlog

from gasless_dao import __version__
from gasless_dao.monitoring.logging import (
    LoggingContextMiddleware,
    add_service_info,
    bind_context,
    clear_context,
    configure_logging,
    log_duration,
    sanitize_sensitive_data,
)


@pytest.fixture(autouse=True)
def clean_context():
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()


# ==================== Processor Tests ====================


class TestSanitizeSensitiveData:
    """Tests for the redaction processor."""

    def test_redacts_keys(self):
        event = {"event": "x", "relayer_private_key": "0xabc", "redis_password": "pw"}
        result = sanitize_sensitive_data(None, "info", event)

        assert result["relayer_private_key"] == "[REDACTED]"
        assert result["redis_password"] == "[REDACTED]"
        assert result["event"] == "x"

    def test_shortens_signatures(self):
        signature = "0x" + "ab" * 65
        result = sanitize_sensitive_data(None, "info", {"signature": signature})

        assert result["signature"] == f"{signature[:10]}...{signature[-4:]}"

    def test_nested_values(self):
        event = {"request": {"from": "0x1", "api_key": "k"}, "items": [{"token": "t"}]}
        result = sanitize_sensitive_data(None, "info", event)

        assert result["request"] == {"from": "0x1", "api_key": "[REDACTED]"}
        assert result["items"] == [{"token": "[REDACTED]"}]

    def test_service_info(self):
        result = add_service_info(None, "info", {})
        assert result == {"service": "gasless-dao", "version": __version__}


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_configures_json(self):
        configure_logging(level="DEBUG", json_output=True)
        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert sanitize_sensitive_data in processors

    def test_without_sanitizing(self):
        configure_logging(sanitize_logs=False, include_service_info=False)
        processors = structlog.get_config()["processors"]

        assert sanitize_sensitive_data not in processors
        assert add_service_info not in processors


# ==================== Context Tests ====================


class TestContext:
    """Tests for context binding."""

    def test_bind_and_clear(self):
        bind_context(correlation_id="abc", path="/api/relay")
        assert structlog.contextvars.get_contextvars() == {
            "correlation_id": "abc",
            "path": "/api/relay",
        }

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestLoggingContextMiddleware:
    """Tests for the ASGI middleware."""

    def _run(self, middleware, scope):
        asyncio.run(middleware(scope, MagicMock(), MagicMock()))

    def test_binds_correlation_id_during_request(self):
        seen = {}

        async def app(scope, receive, send):
            seen.update(structlog.contextvars.get_contextvars())

        scope = {
            "type": "http",
            "path": "/api/relay",
            "method": "POST",
            "headers": [(b"x-correlation-id", b"req-1")],
        }
        self._run(LoggingContextMiddleware(app), scope)

        assert seen == {"correlation_id": "req-1", "path": "/api/relay", "method": "POST"}

    def test_generates_correlation_id(self):
        seen = {}

        async def app(scope, receive, send):
            seen.update(structlog.contextvars.get_contextvars())

        self._run(LoggingContextMiddleware(app), {"type": "http", "headers": []})

        assert len(seen["correlation_id"]) == 36

    def test_passes_through_other_scopes(self):
        calls = []

        async def app(scope, receive, send):
            calls.append(scope["type"])
            seen = structlog.contextvars.get_contextvars()
            assert "correlation_id" not in seen

        self._run(LoggingContextMiddleware(app), {"type": "lifespan"})
        assert calls == ["lifespan"]


# ==================== Duration Tests ====================


class TestLogDuration:
    """Tests for log_duration."""

    def test_logs_completion(self):
        logger = MagicMock()

        with log_duration(logger, "relay_submit", sender="0x1"):
            pass

        name = logger.info.call_args.args[0]
        kwargs = logger.info.call_args.kwargs
        assert name == "relay_submit_completed"
        assert kwargs["sender"] == "0x1"
        assert "duration_ms" in kwargs

    def test_logs_failure_and_reraises(self):
        logger = MagicMock()

        with pytest.raises(RuntimeError):
            with log_duration(logger, "relay_submit"):
                raise RuntimeError("boom")

        assert logger.error.call_args.args[0] == "relay_submit_failed"
        assert logger.error.call_args.kwargs["error"] == "boom"
