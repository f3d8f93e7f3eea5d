"""
Inventory Service Routes Registry

Defines service metadata and routes exposed by the inventory service.
"""

SERVICE_METADATA = {
    "service_name": "inventory_service",
    "version": "1.0.0",
    "tags": ['inventory', 'variants', 'v1'],
    "capabilities": [
        'inventory_table',
        'variant_editing',
        'stock_quick_update',
        'inventory_reservation',
        'inventory_release',
        'sale_confirmation',
    ],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/api/v1/inventory/health", "methods": ["GET"], "description": "Service health check (API v1)"},
    {"path": "/api/v1/inventory/products", "methods": ["GET", "POST"], "description": "Inventory table rows / create product with variants"},
    {"path": "/api/v1/inventory/summary", "methods": ["GET"], "description": "Stock status counts"},
    {"path": "/api/v1/inventory/low-stock", "methods": ["GET"], "description": "Records at or below their threshold"},
    {"path": "/api/v1/inventory/variants/combinations", "methods": ["POST"], "description": "Preview variant combinations"},
    {"path": "/api/v1/inventory/products/{product_id}/variants", "methods": ["POST"], "description": "Commit a variant edit"},
    {"path": "/api/v1/inventory/products/{product_id}/inventory-sync", "methods": ["POST"], "description": "Retry a pending stock write"},
    {"path": "/api/v1/inventory/products/{product_id}/stock", "methods": ["PUT"], "description": "Quick stock edit"},
    {"path": "/api/v1/inventory/products/{product_id}/reserve", "methods": ["POST"], "description": "Reserve stock"},
    {"path": "/api/v1/inventory/products/{product_id}/release", "methods": ["POST"], "description": "Release reserved stock"},
    {"path": "/api/v1/inventory/products/{product_id}/confirm", "methods": ["POST"], "description": "Confirm a sale"},
    {"path": "/api/v1/inventory/products/{product_id}/availability", "methods": ["GET"], "description": "Check availability"},
]


def get_route_metadata():
    """Route metadata reported by the health endpoint"""
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join([r["path"] for r in ROUTES]),
        "api_version": "v1",
        "base_path": "/api/v1/inventory",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_metadata"]
