"""
Inventory Service Event Models

Pydantic models for events published by inventory service
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Event Type Definitions (Service-Specific)
# =============================================================================

class InventoryEventType(str, Enum):
    """
    Events published by inventory_service.

    Subjects: inventory.>
    """
    VARIANTS_SAVED = "inventory.variants_saved"
    STOCK_UPDATED = "inventory.stock_updated"
    SYNC_PENDING = "inventory.sync_pending"
    LOW_STOCK = "inventory.low_stock"
    STOCK_RESERVED = "inventory.reserved"
    STOCK_RELEASED = "inventory.released"
    SALE_CONFIRMED = "inventory.sale_confirmed"


# =============================================================================
# Event Data Models
# =============================================================================

class VariantsSavedEvent(BaseModel):
    """Event published when an editing session commits successfully"""
    product_id: str
    product_name: str
    total_stock: int
    variant_types: List[Dict[str, Any]] = Field(default_factory=list)
    combination_count: int = 0
    is_new: bool = False
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class StockUpdatedEvent(BaseModel):
    """Event published when a product's aggregate stock changes"""
    product_id: str
    previous_stock: Optional[int] = None
    new_stock: int
    reason: str = "manual_update"
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class InventorySyncPendingEvent(BaseModel):
    """Event published when the product was saved but its stock was not"""
    product_id: str
    stock: int
    error_message: str
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class LowStockEvent(BaseModel):
    """Event published when stock falls to or below the threshold"""
    product_id: str
    stock: int
    low_stock_threshold: int
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class StockMovementEvent(BaseModel):
    """Event published for reserve / release / confirmed sale"""
    product_id: str
    quantity: int
    stock: int
    reserved: int
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)
