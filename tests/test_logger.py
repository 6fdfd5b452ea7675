"""
Tests for the structured logger.

Run with: pytest tests/test_logger.py -v
"""

import json
import logging

import pytest

from implicate.inference.registry import Registry
from implicate.logger import create_test_logger, logger
from implicate.settings import DEFAULTS, DotDict, _deep_merge, reload_settings


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def captured():
    """Test logger with a handler collecting formatted messages."""
    test_logger = create_test_logger("capture")
    handler = ListHandler()
    test_logger.logger.addHandler(handler)
    test_logger.logger.setLevel(logging.DEBUG)
    yield test_logger, handler
    test_logger.logger.removeHandler(handler)


class TestStructuredLogger:

    def test_readable_format(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "readable")
        test_logger, handler = captured

        test_logger.info("Registry created", implicators=3)

        assert handler.messages[-1] == "Registry created [implicators=3]"

    def test_json_format(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        test_logger, handler = captured

        test_logger.warning("Slow producer", elapsed_ms=12)

        entry = json.loads(handler.messages[-1])
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Slow producer"
        assert entry["elapsed_ms"] == 12
        assert entry["logger"] == "implicate.capture"

    def test_resolution_id_prefix(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "readable")
        test_logger, handler = captured

        token = test_logger.set_resolution("res_1234")
        try:
            test_logger.info("inside")
        finally:
            test_logger.reset_resolution(token)
        test_logger.info("outside")

        assert handler.messages[-2] == "[res_1234] inside"
        assert handler.messages[-1] == "outside"

    def test_event_respects_level(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "readable")
        test_logger, handler = captured
        test_logger.logger.setLevel(logging.INFO)

        test_logger.event("implicator.put", level=logging.DEBUG, type="b")
        test_logger.event("registry.get.returned", type="b")

        assert handler.messages == ["registry.get.returned [type=b]"]

    def test_json_handles_unserializable_values(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        test_logger, handler = captured

        test_logger.info("value", value=object())

        assert "object object" in json.loads(handler.messages[-1])["value"]

    def test_context_fields(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        test_logger, handler = captured

        test_logger.set_context(service="attributes")
        try:
            test_logger.info("hello")
        finally:
            test_logger.clear_context()

        assert json.loads(handler.messages[-1])["service"] == "attributes"


class TestResolutionIdScope:

    @pytest.mark.asyncio
    async def test_registry_get_sets_and_restores_resolution_id(self):
        registry = Registry()
        registry.imply([], ["ResolutionId"], lambda ctx: ctx.put("ResolutionId", logger.resolution_id))

        before = logger.resolution_id
        value = await registry.get("ResolutionId", "n")

        assert value.startswith("res_")
        assert before is None
        assert logger.resolution_id is None


class TestSettingsIntegration:
    """Format and level follow the current settings object."""

    def test_format_follows_swapped_settings(self, captured, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        test_logger, handler = captured
        swapped = DotDict(_deep_merge(DEFAULTS, {"logging": {"format": "json"}}))
        monkeypatch.setattr("implicate.settings._settings", swapped)

        test_logger.info("after swap", implicators=1)

        entry = json.loads(handler.messages[-1])
        assert entry["message"] == "after swap"
        assert entry["implicators"] == 1

    def test_format_follows_reload(self, captured, monkeypatch, tmp_path):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        test_logger, handler = captured
        config = tmp_path / "settings.yaml"
        config.write_text("logging:\n  format: json\n", encoding="utf-8")
        monkeypatch.setattr("implicate.settings.SETTINGS_FILE", config)
        monkeypatch.setattr("implicate.settings._settings", None)

        reload_settings()
        test_logger.info("reloaded")

        assert json.loads(handler.messages[-1])["message"] == "reloaded"

    def test_env_overrides_settings(self, captured, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "readable")
        test_logger, handler = captured
        swapped = DotDict(_deep_merge(DEFAULTS, {"logging": {"format": "json"}}))
        monkeypatch.setattr("implicate.settings._settings", swapped)

        test_logger.info("plain")

        assert handler.messages[-1] == "plain"
