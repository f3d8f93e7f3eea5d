"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── inventory/   Editor, service, repository, events, API
    └── mocks/       Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component/inventory -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.component.mocks import MockEventBus, MockProductStore


# =============================================================================
# Event Bus Mocks
# =============================================================================

@pytest.fixture
def mock_event_bus() -> MockEventBus:
    """Mock event bus"""
    return MockEventBus()


# =============================================================================
# Store Mocks
# =============================================================================

@pytest.fixture
def mock_store() -> MockProductStore:
    """Empty in-memory product / inventory store"""
    return MockProductStore()
