"""
Configuration and Event Envelope - Unit Tests

Tests for:
- Environment-driven settings
- Logging setup
- Event envelope serialization
"""

import json
import logging
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from core.config import (
    BoutiqueConfig,
    EventBusConfig,
    LoggingConfig,
    StoreConfig,
    configure_logging,
    reload_settings,
)
from core.config.boutique_config import InventoryConfig
from core.event_bus import Event, EventType, ServiceSource

pytestmark = pytest.mark.unit


class TestStoreConfig:

    def test_defaults(self):
        config = StoreConfig()
        assert config.rest_url == "http://localhost:54321/rest/v1"
        assert not config.is_configured

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://shop.supabase.co/")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        monkeypatch.setenv("STORE_TIMEOUT", "not-a-number")
        monkeypatch.setenv("INVENTORY_TABLE", "stock")

        config = StoreConfig.from_env()

        assert config.rest_url == "https://shop.supabase.co/rest/v1"
        assert config.is_configured
        assert config.timeout == 10.0
        assert config.inventory_table == "stock"


class TestEventBusConfig:

    def test_defaults(self):
        config = EventBusConfig()
        assert config.enabled
        assert config.servers == "nats://localhost:4222"
        assert config.stream_name == "inventory-stream"

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("NATS_URL", raising=False)
        monkeypatch.setenv("EVENT_BUS_ENABLED", "false")
        monkeypatch.setenv("NATS_HOST", "nats.internal")
        monkeypatch.setenv("NATS_PORT", "bad")

        config = EventBusConfig.from_env()

        assert not config.enabled
        assert config.servers == "nats://nats.internal:4222"

    def test_url_overrides_host(self, monkeypatch):
        monkeypatch.setenv("NATS_URL", "nats://broker:4333")
        assert EventBusConfig.from_env().servers == "nats://broker:4333"


class TestBoutiqueConfig:

    def test_inventory_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_LOW_STOCK_THRESHOLD", "3")
        monkeypatch.setenv("SERVICE_PORT", "9000")

        config = InventoryConfig.from_env()

        assert config.default_low_stock_threshold == 3
        assert config.service_port == 9000

    def test_reload_settings(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        try:
            settings = reload_settings()
            assert isinstance(settings, BoutiqueConfig)
            assert settings.debug
        finally:
            monkeypatch.delenv("DEBUG")
            reload_settings()


class TestLogging:

    def test_configure_logging(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        log_file = tmp_path / "inventory.log"
        try:
            configure_logging(LoggingConfig(log_level="warning", log_file=str(log_file), enable_console=False))

            logging.getLogger("inventory.test").warning("stock low")
            for handler in root.handlers:
                handler.flush()

            assert root.level == logging.WARNING
            assert "stock low" in log_file.read_text()
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)


class TestEventEnvelope:

    def test_envelope_fields(self):
        event = Event(
            event_type=EventType.INVENTORY_LOW_STOCK,
            source=ServiceSource.INVENTORY_SERVICE,
            data={"product_id": "p1"},
            subject="p1",
        )

        assert event.type == "inventory.low_stock"
        assert event.source == "inventory_service"
        assert event.to_dict()["subject"] == "p1"

    def test_json_handles_decimal(self):
        event = Event(
            event_type=EventType.INVENTORY_VARIANTS_SAVED,
            source=ServiceSource.INVENTORY_SERVICE,
            data={"price": Decimal("19.90")},
        )

        assert json.loads(event.to_json())["data"]["price"] == 19.9

    def test_timestamp_is_timezone_aware(self):
        event = Event(
            event_type=EventType.INVENTORY_RESERVED,
            source=ServiceSource.INVENTORY_SERVICE,
            data={"quantity": 2},
        )

        assert datetime.fromisoformat(event.timestamp).utcoffset() == timedelta(0)
