"""
Inventory Event Publishers - Component Tests

Tests for:
- Event envelope contents
- Skipping when no event bus is configured
- Publishing failures reported as False
"""

from unittest.mock import AsyncMock

import pytest

from core.event_bus import EventType
from microservices.inventory_service.events import (
    InventoryEventType,
    publish_low_stock,
    publish_stock_movement,
    publish_stock_updated,
    publish_sync_pending,
    publish_variants_saved,
)

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


class TestPublishers:

    async def test_variants_saved_envelope(self, mock_event_bus):
        published = await publish_variants_saved(
            mock_event_bus,
            product_id="p1",
            product_name="Vestido",
            total_stock=8,
            variant_types=[{"id": "t1", "name": "Talla", "values": ["S", "M"]}],
            combination_count=2,
        )

        event = mock_event_bus.get_last_event()
        assert published
        assert event["type"] == "inventory.variants_saved"
        assert event["source"] == "inventory_service"
        assert event["subject"] == "p1"
        assert event["data"]["total_stock"] == 8
        assert event["data"]["variant_types"][0]["values"] == ["S", "M"]

    async def test_stock_updated(self, mock_event_bus):
        await publish_stock_updated(mock_event_bus, product_id="p1", new_stock=4, previous_stock=9)
        mock_event_bus.assert_event_published(
            "inventory.stock_updated", {"new_stock": 4, "previous_stock": 9, "reason": "manual_update"}
        )

    async def test_sync_pending(self, mock_event_bus):
        await publish_sync_pending(mock_event_bus, product_id="p1", stock=3, error_message="timeout")
        mock_event_bus.assert_event_published("inventory.sync_pending", {"stock": 3, "error_message": "timeout"})

    async def test_low_stock(self, mock_event_bus):
        await publish_low_stock(mock_event_bus, product_id="p1", stock=2, low_stock_threshold=5)
        mock_event_bus.assert_event_published("inventory.low_stock", {"low_stock_threshold": 5})

    @pytest.mark.parametrize("event_type", [
        EventType.INVENTORY_RESERVED,
        EventType.INVENTORY_RELEASED,
        EventType.INVENTORY_SALE_CONFIRMED,
    ])
    async def test_stock_movement(self, mock_event_bus, event_type):
        await publish_stock_movement(
            mock_event_bus, event_type, product_id="p1", quantity=1, stock=5, reserved=1
        )
        mock_event_bus.assert_event_published(event_type.value, {"quantity": 1})

    async def test_without_event_bus(self):
        assert await publish_low_stock(None, product_id="p1", stock=2, low_stock_threshold=5) is False

    async def test_publish_failure(self, mock_event_bus):
        mock_event_bus.set_error(RuntimeError("bus down"))

        published = await publish_stock_updated(mock_event_bus, product_id="p1", new_stock=1)

        assert published is False
        mock_event_bus.assert_no_events_published()

    async def test_rejected_by_bus(self):
        bus = AsyncMock()
        bus.publish_event.return_value = False

        assert await publish_low_stock(bus, product_id="p1", stock=2, low_stock_threshold=5) is False
        bus.publish_event.assert_awaited_once()

    async def test_event_types_match_envelope_vocabulary(self):
        assert {e.value for e in InventoryEventType} == {e.value for e in EventType}
