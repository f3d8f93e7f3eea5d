"""Inventory Service API for the boutique admin inventory screen."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from core.config import configure_logging, get_settings
from core.event_bus import NATSEventBus, get_event_bus

from .inventory_service import InventoryService
from .models import (
    AvailabilityResponse,
    CombinationPreviewRequest,
    CombinationPreviewResponse,
    CommitResult,
    InventoryItem,
    InventoryRow,
    InventorySummary,
    StockQuantityRequest,
    StockUpdateRequest,
    VariantCommitRequest,
)
from .protocols import (
    EditorValidationError,
    InsufficientStockError,
    InvalidEditorStateError,
    InvalidStockError,
    InventorySyncPendingError,
    ProductNotFoundError,
    ProductStoreError,
)
from .routes_registry import SERVICE_METADATA, get_route_metadata

logger = logging.getLogger(__name__)

inventory_service: Optional[InventoryService] = None
event_bus: Optional[NATSEventBus] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global inventory_service, event_bus

    settings = get_settings()
    configure_logging(settings.logging)

    # Initialize event bus for event-driven communication
    if settings.event_bus.enabled:
        try:
            event_bus = await get_event_bus(settings.event_bus, settings.inventory.service_name)
            logger.info("Event bus initialized successfully")
        except Exception as e:
            logger.warning(f"Failed to initialize event bus: {e}. Continuing without event publishing.")
            event_bus = None
    else:
        logger.info("Event bus disabled, events will not be published")

    try:
        from .factory import create_inventory_service
        inventory_service = await create_inventory_service(settings, event_bus=event_bus)
        logger.info("Inventory service initialized")
    except Exception as e:
        logger.error(f"Failed to initialize inventory service: {e}")
        inventory_service = None

    logger.info("Inventory Service started")

    yield

    if inventory_service:
        try:
            await inventory_service.store.close()
            logger.info("Table store client closed")
        except Exception as e:
            logger.error(f"Error closing table store client: {e}")

    if event_bus:
        try:
            await event_bus.close()
            logger.info("Event bus closed")
        except Exception as e:
            logger.error(f"Error closing event bus: {e}")

    logger.info("Inventory Service shutting down...")


app = FastAPI(title="inventory_service", version=SERVICE_METADATA["version"], lifespan=lifespan)


def get_inventory_service() -> InventoryService:
    """Get inventory service instance"""
    if not inventory_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return inventory_service


# ====================
# Exception Handlers
# ====================

@app.exception_handler(EditorValidationError)
async def validation_error_handler(request: Request, exc: EditorValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(InvalidStockError)
async def invalid_stock_handler(request: Request, exc: InvalidStockError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


@app.exception_handler(ProductNotFoundError)
async def product_not_found_handler(request: Request, exc: ProductNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(InsufficientStockError)
async def insufficient_stock_handler(request: Request, exc: InsufficientStockError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "requested": exc.requested,
            "available": exc.available,
        },
    )


@app.exception_handler(InvalidEditorStateError)
async def invalid_state_handler(request: Request, exc: InvalidEditorStateError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "state": exc.current_state},
    )


@app.exception_handler(InventorySyncPendingError)
async def sync_pending_handler(request: Request, exc: InventorySyncPendingError):
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={
            "detail": str(exc),
            "product_id": exc.product_id,
            "stock": exc.stock,
            "pending_inventory_sync": True,
        },
    )


@app.exception_handler(ProductStoreError)
async def store_error_handler(request: Request, exc: ProductStoreError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc), "upstream_status": exc.status_code},
    )


# ====================
# Health
# ====================

@app.get("/api/v1/inventory/health")
@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": SERVICE_METADATA["service_name"],
        "version": SERVICE_METADATA["version"],
        "initialized": inventory_service is not None,
        **get_route_metadata(),
    }


# ====================
# Inventory Table
# ====================

@app.get("/api/v1/inventory/products", response_model=List[InventoryRow])
async def list_inventory(service: InventoryService = Depends(get_inventory_service)):
    """Inventory table: products with stock, status and variant count"""
    return await service.list_inventory_rows()


@app.get("/api/v1/inventory/summary", response_model=InventorySummary)
async def inventory_summary(service: InventoryService = Depends(get_inventory_service)):
    return await service.get_summary()


@app.get("/api/v1/inventory/low-stock", response_model=List[InventoryItem])
async def low_stock(service: InventoryService = Depends(get_inventory_service)):
    return await service.get_low_stock()


# ====================
# Variant Editing
# ====================

@app.post("/api/v1/inventory/variants/combinations", response_model=CombinationPreviewResponse)
async def preview_combinations(
    payload: CombinationPreviewRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """Combinations the stock grid would show for the submitted variant types"""
    return service.preview_combinations(payload.variant_types)


@app.post(
    "/api/v1/inventory/products",
    response_model=CommitResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: VariantCommitRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """Create a product together with its variant types and stock"""
    return await service.create_product(payload)


@app.post("/api/v1/inventory/products/{product_id}/variants", response_model=CommitResult)
async def commit_variants(
    product_id: str,
    payload: VariantCommitRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Replace a product's basics, variant types and stock.

    The product is written first, then its aggregate stock. When only the
    second write fails the response is 202 and the stock write can be retried.
    """
    return await service.apply_variant_edit(product_id, payload)


@app.post("/api/v1/inventory/products/{product_id}/inventory-sync", response_model=CommitResult)
async def retry_inventory_sync(
    product_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    return await service.retry_inventory_sync(product_id)


# ====================
# Stock Operations
# ====================

@app.put("/api/v1/inventory/products/{product_id}/stock", response_model=InventoryItem)
async def update_stock(
    product_id: str,
    payload: StockUpdateRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """Quick stock edit from the inventory table"""
    return await service.quick_update_stock(product_id, payload.stock)


@app.post("/api/v1/inventory/products/{product_id}/reserve", response_model=InventoryItem)
async def reserve_stock(
    product_id: str,
    payload: StockQuantityRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    return await service.reserve_stock(product_id, payload.quantity)


@app.post("/api/v1/inventory/products/{product_id}/release", response_model=InventoryItem)
async def release_stock(
    product_id: str,
    payload: StockQuantityRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    return await service.release_stock(product_id, payload.quantity)


@app.post("/api/v1/inventory/products/{product_id}/confirm", response_model=InventoryItem)
async def confirm_sale(
    product_id: str,
    payload: StockQuantityRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    return await service.confirm_sale(product_id, payload.quantity)


@app.get("/api/v1/inventory/products/{product_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    product_id: str,
    quantity: int = Query(1, gt=0),
    service: InventoryService = Depends(get_inventory_service),
):
    return await service.check_availability(product_id, quantity)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().inventory.service_port)
