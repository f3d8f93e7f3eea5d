"""
Inventory Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import InventoryItem, Product


# ====================
# Errors
# ====================


class InventoryServiceError(Exception):
    """Base exception for inventory service errors"""
    pass


class EditorValidationError(InventoryServiceError):
    """Raised when operator input is rejected before any state change"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidStockError(InventoryServiceError):
    """Raised when a stock value or quantity is rejected"""
    pass


class ProductNotFoundError(InventoryServiceError):
    """Product not found error"""
    pass


class InsufficientStockError(InventoryServiceError):
    """Raised when available stock cannot cover a reservation"""

    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidEditorStateError(InventoryServiceError):
    """Raised when an editor operation is not allowed in the current state"""

    def __init__(self, message: str, current_state: Optional[str] = None):
        super().__init__(message)
        self.current_state = current_state


class ProductStoreError(InventoryServiceError):
    """Raised when the table store rejects or fails a request"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InventorySyncPendingError(InventoryServiceError):
    """Raised when the product was written but its aggregate stock was not"""

    def __init__(self, product_id: str, stock: int, reason: str = ""):
        super().__init__(
            f"Product {product_id} saved but inventory write failed"
            + (f": {reason}" if reason else "")
        )
        self.product_id = product_id
        self.stock = stock
        self.reason = reason


# ====================
# Collaborators
# ====================


@runtime_checkable
class ProductStoreProtocol(Protocol):
    """
    Interface for the product / inventory table store.

    Implementations must provide these methods.
    Used for dependency injection to enable testing.
    """

    async def fetch_products(self) -> List[Product]:
        """Get all products"""
        ...

    async def fetch_inventory(self) -> List[InventoryItem]:
        """Get all inventory records"""
        ...

    async def get_inventory(self, product_id: str) -> Optional[InventoryItem]:
        """Get inventory record for one product"""
        ...

    async def save_product(self, product: Product) -> Product:
        """Upsert product, returns canonical stored form"""
        ...

    async def save_inventory_total(self, product_id: str, stock: int) -> InventoryItem:
        """Set the aggregate stock field only"""
        ...

    async def update_inventory(
        self, product_id: str, updates: Dict[str, Any]
    ) -> Optional[InventoryItem]:
        """Update inventory fields (stock, reserved)"""
        ...

    async def initialize(self) -> None:
        """Initialize store client"""
        ...

    async def close(self) -> None:
        """Close store client"""
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for Event Bus - no I/O imports"""

    async def publish_event(self, event: Any) -> None:
        """Publish an event"""
        ...

    async def close(self) -> None:
        """Close event bus connection"""
        ...


__all__ = [
    "InventoryServiceError",
    "EditorValidationError",
    "InvalidStockError",
    "ProductNotFoundError",
    "InsufficientStockError",
    "InvalidEditorStateError",
    "ProductStoreError",
    "InventorySyncPendingError",
    "ProductStoreProtocol",
    "EventBusProtocol",
]
