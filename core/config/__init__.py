#!/usr/bin/env python3
"""Modular configuration system for the boutique back office

Configuration hierarchy:
- store_config: hosted table store (products, inventory)
- event_bus_config: NATS broker for inventory events
- boutique_config: inventory settings and the combined settings object
- logging_config: logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig, configure_logging
from .store_config import StoreConfig
from .event_bus_config import EventBusConfig
from .boutique_config import BoutiqueConfig, InventoryConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = BoutiqueConfig.from_env()

def get_settings() -> BoutiqueConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> BoutiqueConfig:
    """Reload settings from environment"""
    global settings
    settings = BoutiqueConfig.from_env()
    return settings

__all__ = [
    # Main config
    'BoutiqueConfig',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'StoreConfig',
    'EventBusConfig',
    'InventoryConfig',
    'configure_logging',
]
