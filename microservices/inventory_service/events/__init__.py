"""
Inventory Service Events Module

Exports all event-related functionality for inventory service
"""

from .models import (
    InventoryEventType,
    VariantsSavedEvent,
    StockUpdatedEvent,
    InventorySyncPendingEvent,
    LowStockEvent,
    StockMovementEvent,
)

from .publishers import (
    publish_variants_saved,
    publish_stock_updated,
    publish_sync_pending,
    publish_low_stock,
    publish_stock_movement,
)

__all__ = [
    # Event Types
    "InventoryEventType",
    # Event Models
    "VariantsSavedEvent",
    "StockUpdatedEvent",
    "InventorySyncPendingEvent",
    "LowStockEvent",
    "StockMovementEvent",
    # Publishers
    "publish_variants_saved",
    "publish_stock_updated",
    "publish_sync_pending",
    "publish_low_stock",
    "publish_stock_movement",
]
