"""
Inventory Service Event Publishers

Functions to publish events from inventory service
"""

import logging
from typing import Optional, Dict, Any, List

from pydantic import BaseModel

from core.event_bus import Event, EventType, ServiceSource
from .models import (
    InventorySyncPendingEvent,
    LowStockEvent,
    StockMovementEvent,
    StockUpdatedEvent,
    VariantsSavedEvent,
)

logger = logging.getLogger(__name__)


async def _publish(event_bus, event_type: EventType, payload: BaseModel, subject: str) -> bool:
    if not event_bus:
        logger.warning(f"Event bus not available, skipping {event_type.value} event")
        return False

    try:
        event = Event(
            event_type=event_type,
            source=ServiceSource.INVENTORY_SERVICE,
            data=payload.model_dump(mode='json'),
            subject=subject,
        )

        if not await event_bus.publish_event(event):
            logger.warning(f"Event bus did not accept {event_type.value} event for product {subject}")
            return False
        logger.info(f"Published {event_type.value} event for product {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish {event_type.value} event: {e}")
        return False


async def publish_variants_saved(
    event_bus,
    product_id: str,
    product_name: str,
    total_stock: int,
    variant_types: List[Dict[str, Any]],
    combination_count: int = 0,
    is_new: bool = False,
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """Publish inventory.variants_saved event"""
    return await _publish(
        event_bus,
        EventType.INVENTORY_VARIANTS_SAVED,
        VariantsSavedEvent(
            product_id=product_id,
            product_name=product_name,
            total_stock=total_stock,
            variant_types=variant_types,
            combination_count=combination_count,
            is_new=is_new,
            metadata=metadata or {}
        ),
        product_id,
    )


async def publish_stock_updated(
    event_bus,
    product_id: str,
    new_stock: int,
    previous_stock: Optional[int] = None,
    reason: str = "manual_update",
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """Publish inventory.stock_updated event"""
    return await _publish(
        event_bus,
        EventType.INVENTORY_STOCK_UPDATED,
        StockUpdatedEvent(
            product_id=product_id,
            previous_stock=previous_stock,
            new_stock=new_stock,
            reason=reason,
            metadata=metadata or {}
        ),
        product_id,
    )


async def publish_sync_pending(
    event_bus,
    product_id: str,
    stock: int,
    error_message: str,
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """Publish inventory.sync_pending event"""
    return await _publish(
        event_bus,
        EventType.INVENTORY_SYNC_PENDING,
        InventorySyncPendingEvent(
            product_id=product_id,
            stock=stock,
            error_message=error_message,
            metadata=metadata or {}
        ),
        product_id,
    )


async def publish_low_stock(
    event_bus,
    product_id: str,
    stock: int,
    low_stock_threshold: int,
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """Publish inventory.low_stock event"""
    return await _publish(
        event_bus,
        EventType.INVENTORY_LOW_STOCK,
        LowStockEvent(
            product_id=product_id,
            stock=stock,
            low_stock_threshold=low_stock_threshold,
            metadata=metadata or {}
        ),
        product_id,
    )


async def publish_stock_movement(
    event_bus,
    event_type: EventType,
    product_id: str,
    quantity: int,
    stock: int,
    reserved: int,
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """Publish inventory.reserved / inventory.released / inventory.sale_confirmed"""
    return await _publish(
        event_bus,
        event_type,
        StockMovementEvent(
            product_id=product_id,
            quantity=quantity,
            stock=stock,
            reserved=reserved,
            metadata=metadata or {}
        ),
        product_id,
    )
