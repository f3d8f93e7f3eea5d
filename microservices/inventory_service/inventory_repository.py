"""
Inventory Repository

Data access layer for the products and inventory tables of the hosted
table store, spoken to over its PostgREST interface with httpx.
Matches schema: products, inventory
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Dict, Any

import httpx

from core.config import StoreConfig, get_settings

from .models import InventoryItem, Product, ProductImage
from .protocols import ProductStoreError

logger = logging.getLogger(__name__)


class ProductStoreRepository:
    """
    Repository for product and inventory rows.

    Tables:
        - products: catalog rows, including the legacy sizes / colors fields
        - inventory: one aggregate stock row per product
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize repository

        Args:
            config: Store settings, defaults to the global settings
            client: Preconfigured HTTP client, created on initialize() otherwise
        """
        self.config = config or get_settings().store
        self.base_url = self.config.rest_url
        self.products_table = self.config.products_table
        self.inventory_table = self.config.inventory_table
        self.client = client

        if not self.config.is_configured:
            logger.warning("Table store API key not set, requests may be rejected")
        logger.info(f"ProductStoreRepository initialized with base_url: {self.base_url}")

    async def initialize(self) -> None:
        """Create the HTTP client if none was injected"""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.config.timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ====================
    # Products
    # ====================

    async def fetch_products(self) -> List[Product]:
        """Get all products, newest first"""
        rows = await self._request(
            "GET",
            self.products_table,
            params={"select": "*", "order": "created_at.desc"},
        )
        return [self._row_to_product(row) for row in rows or []]

    async def save_product(self, product: Product) -> Product:
        """Upsert a product row and return the stored form"""
        rows = await self._request(
            "POST",
            self.products_table,
            json=self._product_to_row(product),
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        if not rows:
            raise ProductStoreError(f"Store returned no row for product {product.id}")
        return self._row_to_product(rows[0])

    # ====================
    # Inventory
    # ====================

    async def fetch_inventory(self) -> List[InventoryItem]:
        """Get all inventory rows"""
        rows = await self._request(
            "GET",
            self.inventory_table,
            params={"select": "*", "order": "updated_at.desc"},
        )
        return [self._row_to_inventory(row) for row in rows or []]

    async def get_inventory(self, product_id: str) -> Optional[InventoryItem]:
        """Get the inventory row for one product"""
        rows = await self._request(
            "GET",
            self.inventory_table,
            params={"select": "*", "product_id": f"eq.{product_id}"},
        )
        return self._row_to_inventory(rows[0]) if rows else None

    async def save_inventory_total(self, product_id: str, stock: int) -> InventoryItem:
        """Write the aggregate stock, creating the row when it does not exist"""
        existing = await self.get_inventory(product_id)
        if existing is not None:
            updated = await self.update_inventory(product_id, {"stock": stock})
            if updated is None:
                raise ProductStoreError(f"Inventory row for {product_id} disappeared during update")
            return updated

        rows = await self._request(
            "POST",
            self.inventory_table,
            json={
                "product_id": product_id,
                "stock": stock,
                "reserved": 0,
                "updated_at": self._now(),
            },
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise ProductStoreError(f"Store returned no inventory row for {product_id}")
        return self._row_to_inventory(rows[0])

    async def update_inventory(
        self, product_id: str, updates: Dict[str, Any]
    ) -> Optional[InventoryItem]:
        """Patch inventory fields (stock, reserved) for one product"""
        rows = await self._request(
            "PATCH",
            self.inventory_table,
            params={"product_id": f"eq.{product_id}"},
            json={**updates, "updated_at": self._now()},
            headers={"Prefer": "return=representation"},
        )
        return self._row_to_inventory(rows[0]) if rows else None

    # ====================
    # Helpers
    # ====================

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.config.api_key,
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        if self.client is None:
            await self.initialize()

        url = f"{self.base_url}/{table}"
        try:
            response = await self.client.request(
                method, url, params=params, json=json, headers=self._headers(headers)
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"{method} {table} failed: {status} {e.response.text}")
            raise ProductStoreError(f"{method} {table} failed with status {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {table} failed: {e}")
            raise ProductStoreError(f"{method} {table} failed: {e}") from e

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _json_list(value: Any) -> List[Any]:
        """Handle JSON columns that arrive as text or null"""
        if value is None:
            return []
        if isinstance(value, str):
            value = json.loads(value) if value else []
        return list(value)

    def _row_to_product(self, row: Dict[str, Any]) -> Product:
        images = [ProductImage(**img) for img in self._json_list(row.get("images"))]
        return Product(
            id=str(row["id"]),
            name=row.get("name") or "",
            description=row.get("description") or "",
            price=Decimal(str(row.get("price") or 0)),
            image_url=row.get("image_url") or "",
            images=images,
            category=row.get("category") or "General",
            brand=row.get("brand"),
            sizes=self._json_list(row.get("sizes")),
            colors=self._json_list(row.get("colors")),
            is_featured=bool(row.get("is_featured", False)),
            is_whatsapp_only=bool(row.get("is_whatsapp_only", False)),
            created_at=row.get("created_at"),
        )

    def _product_to_row(self, product: Product) -> Dict[str, Any]:
        row = product.model_dump(mode="json", exclude={"created_at"})
        row["price"] = float(product.price)
        if product.created_at is not None:
            row["created_at"] = product.created_at.isoformat()
        return row

    def _row_to_inventory(self, row: Dict[str, Any]) -> InventoryItem:
        return InventoryItem(
            product_id=str(row["product_id"]),
            stock=int(row.get("stock") or 0),
            reserved=int(row.get("reserved") or 0),
            low_stock_threshold=int(
                row.get("low_stock_threshold")
                if row.get("low_stock_threshold") is not None
                else get_settings().inventory.default_low_stock_threshold
            ),
            last_updated=row.get("updated_at") or row.get("last_updated"),
        )
