"""
Inventory Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules.

Usage:
    from .factory import create_inventory_service
    service = await create_inventory_service(config, event_bus)
"""
from typing import Optional

from core.config import BoutiqueConfig, get_settings

from .inventory_service import InventoryService


async def create_inventory_service(
    config: Optional[BoutiqueConfig] = None,
    event_bus=None,
) -> InventoryService:
    """
    Create InventoryService with real dependencies.

    This function imports the real repository (which has I/O dependencies).
    Use this in production, NOT in tests.

    Args:
        config: Application settings, defaults to the global settings
        event_bus: Event bus for publishing events

    Returns:
        Configured InventoryService instance
    """
    # Import real repository here (not at module level)
    from .inventory_repository import ProductStoreRepository

    config = config or get_settings()
    repository = ProductStoreRepository(config=config.store)
    await repository.initialize()

    return InventoryService(
        store=repository,
        event_bus=event_bus,
        config=config.inventory,
    )


def create_inventory_service_sync(
    config: Optional[BoutiqueConfig] = None,
    event_bus=None,
) -> InventoryService:
    """
    Create InventoryService with real dependencies (sync version).

    This version does NOT initialize the repository async.
    Useful when you need to create the service synchronously and
    initialize later.

    Args:
        config: Application settings, defaults to the global settings
        event_bus: Event bus for publishing events

    Returns:
        Configured InventoryService instance (not initialized)
    """
    # Import real repository here (not at module level)
    from .inventory_repository import ProductStoreRepository

    config = config or get_settings()
    repository = ProductStoreRepository(config=config.store)

    return InventoryService(
        store=repository,
        event_bus=event_bus,
        config=config.inventory,
    )
