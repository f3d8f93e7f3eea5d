"""
Event bus for event-driven communication

Inventory events are published to a NATS JetStream stream. Services receive
the bus as an injected collaborator exposing ``publish_event(event)``, so
tests can swap in a recording mock.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

import nats
from nats.errors import Error as NATSError

from core.config import EventBusConfig

logger = logging.getLogger(__name__)


class DecimalEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles Decimal types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


class EventType(Enum):
    """Event types"""

    # Inventory Events
    INVENTORY_VARIANTS_SAVED = "inventory.variants_saved"
    INVENTORY_STOCK_UPDATED = "inventory.stock_updated"
    INVENTORY_SYNC_PENDING = "inventory.sync_pending"
    INVENTORY_LOW_STOCK = "inventory.low_stock"
    INVENTORY_RESERVED = "inventory.reserved"
    INVENTORY_RELEASED = "inventory.released"
    INVENTORY_SALE_CONFIRMED = "inventory.sale_confirmed"


class ServiceSource(Enum):
    """Services that publish events"""
    INVENTORY_SERVICE = "inventory_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), cls=DecimalEncoder)


class NATSEventBus:
    """
    NATS JetStream event bus.

    Every event is published on its type as subject (e.g.
    ``inventory.low_stock``) into one stream covering ``inventory.>``.
    """

    def __init__(self, config: Optional[EventBusConfig] = None, service_name: str = "inventory_service"):
        self.config = config or EventBusConfig()
        self.service_name = service_name
        self._nc = None
        self._js = None

        logger.info(f"NATS EventBus initialized: {self.config.servers}")

    async def connect(self):
        """Connect to NATS and make sure the inventory stream exists"""
        try:
            self._nc = await nats.connect(
                servers=self.config.servers,
                name=self.service_name,
                connect_timeout=self.config.connect_timeout,
            )
        except Exception as e:
            logger.error(f"Failed to connect to NATS at {self.config.servers}: {e}")
            raise

        self._js = self._nc.jetstream()

        # Idempotent when the stream already exists with the same subjects
        try:
            await self._js.add_stream(name=self.config.stream_name, subjects=["inventory.>"])
        except NATSError as e:
            logger.warning(f"Stream {self.config.stream_name} not created: {e}")

        logger.info(f"Connected to NATS as {self.service_name}, stream {self.config.stream_name}")

    async def publish_event(self, event: Event) -> bool:
        """Publish an event to JetStream; returns False when it was not stored"""
        if not self.is_connected:
            logger.error("Not connected to NATS")
            return False

        try:
            ack = await self._js.publish(
                event.type,
                event.to_json().encode(),
                headers={"event_id": event.id, "event_type": event.type},
            )
        except NATSError as e:
            logger.error(f"Error publishing event {event.id}: {e}")
            return False

        logger.info(f"Published event {event.type} [{event.id}] to stream {ack.stream}, seq={ack.seq}")
        return True

    async def close(self):
        """Close NATS connection"""
        if self._nc is not None:
            await self._nc.close()
            self._nc = None
            self._js = None
        logger.info("Disconnected from NATS")

    @property
    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._nc is not None and self._nc.is_connected


# Singleton instance
_event_bus: Optional[NATSEventBus] = None


async def get_event_bus(
    config: Optional[EventBusConfig] = None,
    service_name: str = "inventory_service",
) -> NATSEventBus:
    """
    Get or create the connected event bus.

    Args:
        config: Broker settings, defaults to EventBusConfig()
        service_name: Client name reported to NATS

    Returns:
        NATSEventBus instance
    """
    global _event_bus

    if _event_bus is None or not _event_bus.is_connected:
        bus = NATSEventBus(config=config, service_name=service_name)
        await bus.connect()
        _event_bus = bus

    return _event_bus
