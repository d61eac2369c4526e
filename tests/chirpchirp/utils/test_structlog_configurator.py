"""Tests for the structlog configurator module."""

import json
import logging
import os
from unittest.mock import Mock, patch

import pytest
import structlog

from chirpchirp.config import ChirpConfig
from chirpchirp.config.models import LoggingConfig
from chirpchirp.utils.structlog_configurator import (
    _add_static_context,
    _configure_handlers,
    _renderer,
    _shared_processors,
    _use_json,
    configure_structlog,
    get_deployment_environment,
    is_container_environment,
)


@pytest.fixture
def restore_logging():
    """Restore root logger handlers and structlog defaults after a test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestAddStaticContext:
    """Test the _add_static_context processor."""

    def test_adds_static_fields(self) -> None:
        """Should add static fields to all log events."""
        processor = _add_static_context({"service": "core-api-service", "version": "1.0.0"})

        result = processor(Mock(spec=structlog.BoundLogger), "info", {"event": "hello"})

        assert result == {"event": "hello", "service": "core-api-service", "version": "1.0.0"}

    def test_overwrites_existing_fields(self) -> None:
        """Should overwrite existing fields with static values."""
        processor = _add_static_context({"service": "override"})

        result = processor(Mock(spec=structlog.BoundLogger), "info", {"service": "original"})

        assert result["service"] == "override"


class TestEnvironmentDetection:
    """Test deployment environment detection."""

    @patch.dict(os.environ, {"K_SERVICE": "core-api-service"}, clear=True)
    def test_cloud_run(self) -> None:
        """Should treat Cloud Run as a container."""
        assert is_container_environment() is True
        assert get_deployment_environment() == "container"

    @patch("chirpchirp.utils.structlog_configurator.os.path.exists", return_value=False)
    @patch.dict(os.environ, {"DOCKER_CONTAINER": "true"}, clear=True)
    def test_docker_flag(self, mock_exists) -> None:
        """Should honor the DOCKER_CONTAINER flag."""
        assert is_container_environment() is True

    @patch("chirpchirp.utils.structlog_configurator.os.path.exists", return_value=False)
    @patch.dict(os.environ, {"CHIRPCHIRP_ENV": "development"}, clear=True)
    def test_development(self, mock_exists) -> None:
        """Should detect development outside containers."""
        assert get_deployment_environment() == "development"

    @patch("chirpchirp.utils.structlog_configurator.os.path.exists", return_value=False)
    @patch.dict(os.environ, {}, clear=True)
    def test_unknown(self, mock_exists) -> None:
        """Should fall back to unknown."""
        assert is_container_environment() is False
        assert get_deployment_environment() == "unknown"


class TestProcessors:
    """Test processor and renderer selection."""

    def test_explicit_json(self) -> None:
        """Should render JSON when configured."""
        config = ChirpConfig(logging=LoggingConfig(json_logs=True))
        assert isinstance(_renderer(config), structlog.processors.JSONRenderer)

    def test_explicit_console(self) -> None:
        """Should render for humans when JSON is disabled."""
        config = ChirpConfig(logging=LoggingConfig(json_logs=False))
        assert isinstance(_renderer(config), structlog.dev.ConsoleRenderer)

    @patch("chirpchirp.utils.structlog_configurator.is_container_environment", return_value=True)
    def test_auto_detects_json_in_containers(self, mock_container) -> None:
        """Should default to JSON inside containers."""
        assert _use_json(ChirpConfig()) is True

    def test_caller_info(self) -> None:
        """Should add call site parameters only when requested."""
        with_caller = _shared_processors(
            ChirpConfig(logging=LoggingConfig(include_caller=True))
        )
        without_caller = _shared_processors(ChirpConfig())

        def has_callsite(chain):
            return any(isinstance(p, structlog.processors.CallsiteParameterAdder) for p in chain)

        assert has_callsite(with_caller)
        assert not has_callsite(without_caller)

    def test_merges_request_context_first(self) -> None:
        """Should merge bound context variables such as the request id."""
        assert _shared_processors(ChirpConfig())[0] is structlog.contextvars.merge_contextvars


@pytest.mark.usefixtures("restore_logging")
class TestConfigure:
    """Test applying the configuration."""

    def test_handlers(self) -> None:
        """Should install a single stdout handler at the configured level."""
        config = ChirpConfig(logging=LoggingConfig(level="WARNING"))

        _configure_handlers(config, _shared_processors(config))

        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root_logger.level == logging.WARNING

    def test_configure_structlog(self) -> None:
        """Should configure structlog and set the root level."""
        configure_structlog(ChirpConfig(logging=LoggingConfig(level="DEBUG", json_logs=True)))

        assert structlog.is_configured()
        assert logging.getLogger().level == logging.DEBUG

    def test_stdlib_records_render_as_json(self, capsys) -> None:
        """Should render stdlib records with context, static and extra fields."""
        configure_structlog(
            ChirpConfig(
                logging=LoggingConfig(json_logs=True, extra_fields={"region": "us-central1"})
            )
        )
        capsys.readouterr()
        structlog.contextvars.bind_contextvars(request_id="req-1")

        logging.getLogger("chirpchirp.test").info("served %s", "/images", extra={"status": 200})

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "served /images"
        assert record["level"] == "info"
        assert record["service"] == "core-api-service"
        assert record["region"] == "us-central1"
        assert record["request_id"] == "req-1"
        assert record["status"] == 200
