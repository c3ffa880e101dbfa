"""Tests for structured logging helpers."""

import contextvars

import structlog

from shared.utils.logging import (
    add_correlation_id,
    configure_logging,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)


def _in_fresh_context(func):
    return contextvars.copy_context().run(func)


class TestCorrelationId:
    """Tests for the correlation ID context variable."""

    def test_set_explicit_id(self):
        def run():
            assert set_correlation_id("req-123") == "req-123"
            return get_correlation_id()

        assert _in_fresh_context(run) == "req-123"

    def test_set_generates_id_when_missing(self):
        def run():
            generated = set_correlation_id(None)
            return generated, get_correlation_id()

        generated, current = _in_fresh_context(run)
        assert len(generated) == 32
        assert current == generated

    def test_processor_adds_id(self):
        def run():
            set_correlation_id("req-456")
            return add_correlation_id(None, "info", {"event": "file_uploaded"})

        event_dict = _in_fresh_context(run)
        assert event_dict["correlation_id"] == "req-456"

    def test_processor_skips_when_unset(self):
        def run():
            return add_correlation_id(None, "info", {"event": "file_uploaded"})

        ctx = contextvars.Context()
        assert "correlation_id" not in ctx.run(run)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_binds_service_name(self):
        def run():
            configure_logging("file-gateway-test", log_level="DEBUG", json_format=False)
            return structlog.contextvars.get_contextvars()

        assert _in_fresh_context(run)["service"] == "file-gateway-test"

    def test_unknown_level_falls_back(self):
        # Must not raise on a bad level name
        _in_fresh_context(lambda: configure_logging("svc", log_level="LOUD"))

    def test_get_logger(self):
        logger = get_logger("test")
        assert hasattr(logger, "info")
