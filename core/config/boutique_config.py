#!/usr/bin/env python3
"""Boutique back office main configuration

Combines all sub-configs and includes inventory-specific settings.
"""
import os
from dataclasses import dataclass, field

from .event_bus_config import EventBusConfig
from .logging_config import LoggingConfig
from .store_config import StoreConfig


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


# ===========================================
# Inventory-Specific Configuration
# ===========================================

@dataclass
class InventoryConfig:
    """Inventory service settings"""
    service_name: str = "inventory_service"
    service_port: int = 8252
    default_low_stock_threshold: int = 10
    # Product id used by stock entries while a product is still being created
    new_product_placeholder: str = "new-product"

    @classmethod
    def from_env(cls) -> 'InventoryConfig':
        return cls(
            service_name=os.getenv("SERVICE_NAME", "inventory_service"),
            service_port=_int(os.getenv("SERVICE_PORT", "8252"), 8252),
            default_low_stock_threshold=_int(os.getenv("DEFAULT_LOW_STOCK_THRESHOLD", "10"), 10),
            new_product_placeholder=os.getenv("NEW_PRODUCT_PLACEHOLDER", "new-product"),
        )


# ===========================================
# Main Boutique Configuration
# ===========================================

@dataclass
class BoutiqueConfig:
    """
    Main configuration for the boutique back office.

    Combines:
    - store: hosted table store (products, inventory)
    - inventory: inventory service settings
    - event_bus: NATS broker for inventory events
    - logging: logging settings
    """
    environment: str = "development"
    debug: bool = False

    store: StoreConfig = field(default_factory=StoreConfig)
    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    event_bus: EventBusConfig = field(default_factory=EventBusConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'BoutiqueConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            store=StoreConfig.from_env(),
            inventory=InventoryConfig.from_env(),
            event_bus=EventBusConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )
