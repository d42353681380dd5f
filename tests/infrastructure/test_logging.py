"""Tests for structlog configuration."""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from shared.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None, None, None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    levels = {name: logging.getLogger(name).level for name in ("shared", "services")}
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_levels(self) -> None:
        configure_logging("DEBUG", "text")
        assert logging.getLogger("shared").level == logging.DEBUG
        assert logging.getLogger("services").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging("LOUD", "text")
        assert logging.getLogger("shared").level == logging.INFO

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", "json")
        log = structlog.get_logger("shared.domain.test")
        log.info("student enrolled", number=1)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "student enrolled"
        assert parsed["number"] == 1
        assert parsed["level"] == "info"
        assert parsed["logger"] == "shared.domain.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging("INFO", "json")
        logging.getLogger("services.enrollment_service").info("ready")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "ready"
        assert parsed["logger"] == "services.enrollment_service"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging("DEBUG", "json")
        logging.getLogger("sqlalchemy.engine").info("SELECT 1")
        logging.getLogger("aiosqlite").debug("noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging("INFO", "json")
        configure_logging("INFO", "json")
        assert len(logging.getLogger().handlers) == 1
