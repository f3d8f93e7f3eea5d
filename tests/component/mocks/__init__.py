"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (table store, event bus).
"""

from .nats_mock import MockEventBus
from .store_mock import MockProductStore

__all__ = [
    'MockEventBus',
    'MockProductStore',
]
