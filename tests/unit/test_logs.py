"""Unit tests for specproxy.logs."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import structlog

from specproxy.config import LoggingSettings
from specproxy.logs import configure_logging

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="INFO", format="json"))
        structlog.get_logger().info("spec_resolved", full_name="rack-3.0.8")

        line = capsys.readouterr().err.strip()
        record = json.loads(line)
        assert record["event"] == "spec_resolved"
        assert record["full_name"] == "rack-3.0.8"
        assert record["level"] == "info"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="WARNING", format="json"))
        structlog.get_logger().info("hidden")
        structlog.get_logger().warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_text_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="DEBUG", format="text"))
        structlog.get_logger().debug("stub_header_skipped", path="/x")

        err = capsys.readouterr().err
        assert "stub_header_skipped" in err
        assert "path=/x" in err
