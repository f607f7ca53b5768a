"""Unit tests for the structlog configuration helpers."""

from __future__ import annotations

import logging

import structlog

from clausefinder.utils.logging import configure_logging, get_logger


class TestConfigureLogging:
    def test_root_logger_bridged(self) -> None:
        configure_logging(log_level="warning", json_output=True)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_http_client_loggers_quietened(self) -> None:
        configure_logging(log_level="INFO")
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_production_renders_json(self) -> None:
        configure_logging(app_env="production")
        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)


class TestGetLogger:
    def test_returns_usable_logger(self, capsys) -> None:
        configure_logging(log_level="INFO", json_output=True)
        get_logger("clausefinder.tests").info("chunk_indexed", chunks=3)

        out = capsys.readouterr().out
        assert '"event": "chunk_indexed"' in out
        assert '"logger_name": "clausefinder.tests"' in out
