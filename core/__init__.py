#!/usr/bin/env python3
"""
Core Module for the Boutique Back Office

Shared components for the inventory service.

COMPONENTS:
    - config/: Environment-driven configuration (store, inventory, logging)
    - event_bus.py: Event envelope and event vocabulary

USAGE:
    from core.config import get_settings
    from core.event_bus import Event, EventType, ServiceSource

    settings = get_settings()

VERSION: 1.0.0
"""
