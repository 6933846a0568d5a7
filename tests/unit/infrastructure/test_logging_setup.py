"""Tests for structlog + dictConfig logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from relayplay.infrastructure.config import AppConfig
from relayplay.infrastructure.logging import build_logging_config, configure_logging


def _renderer(cfg: dict) -> object:
    return cfg["formatters"]["structlog"]["processors"][-1]


def test_console_renderer_by_default() -> None:
    cfg = build_logging_config(AppConfig())
    assert isinstance(_renderer(cfg), structlog.dev.ConsoleRenderer)


def test_json_renderer_in_prod() -> None:
    cfg = build_logging_config(AppConfig(environment="prod"))
    assert isinstance(_renderer(cfg), structlog.processors.JSONRenderer)


def test_transport_loggers_stay_quiet() -> None:
    cfg = build_logging_config(AppConfig(log_level="INFO"))
    assert cfg["loggers"]["httpx"]["level"] == "WARNING"
    assert cfg["loggers"]["httpcore"]["level"] == "WARNING"
    assert cfg["loggers"]["uvicorn"]["level"] == "INFO"
    assert cfg["root"]["level"] == "INFO"


def test_debug_opens_transport_loggers() -> None:
    cfg = build_logging_config(AppConfig(log_level="DEBUG"))
    assert cfg["loggers"]["httpx"]["level"] == "DEBUG"


def test_base_config_is_not_mutated() -> None:
    build_logging_config(AppConfig(log_level="ERROR"))
    cfg = build_logging_config(AppConfig(log_level="INFO"))
    assert cfg["loggers"]["uvicorn"]["level"] == "INFO"


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_configure_logging_applies_config(restore_logging) -> None:
    cfg = configure_logging(AppConfig(log_level="WARNING"))
    assert cfg["root"]["level"] == "WARNING"
    assert logging.getLogger().level == logging.WARNING
