"""
Inventory Service Business Logic

Inventory table, product variant editing sessions, quick stock edits and
stock reservations for the boutique back office.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from core.config.boutique_config import InventoryConfig
from core.event_bus import EventType

from .events.publishers import (
    publish_low_stock,
    publish_stock_movement,
    publish_stock_updated,
    publish_sync_pending,
    publish_variants_saved,
)
from .models import (
    AvailabilityResponse,
    CombinationPreview,
    CombinationPreviewResponse,
    CommitResult,
    InventoryItem,
    InventoryRow,
    InventorySummary,
    Product,
    StockStatus,
    VariantCommitRequest,
    VariantStockEntry,
    VariantType,
    VariantTypeInput,
)
from .product_editor import ProductVariantEditor, seed_variant_types
from .protocols import (
    EditorValidationError,
    InsufficientStockError,
    InvalidStockError,
    InventorySyncPendingError,
    ProductNotFoundError,
    ProductStoreError,
    ProductStoreProtocol,
)
from .variant_engine import count_combinations, format_combination, generate_combinations, variant_count

logger = logging.getLogger(__name__)


class InventoryService:
    """Inventory business logic"""

    def __init__(
        self,
        store: ProductStoreProtocol,
        event_bus=None,
        config: Optional[InventoryConfig] = None,
    ):
        """
        Initialize Inventory Service

        Args:
            store: Product / inventory table store
            event_bus: Event bus instance (optional)
            config: Inventory settings
        """
        self.store = store
        self.event_bus = event_bus
        self.config = config or InventoryConfig()

        # Variant metadata is not persisted; it lives for the process lifetime
        self._variant_types: Dict[str, List[VariantType]] = {}
        self._variant_stock: Dict[str, List[VariantStockEntry]] = {}
        self._pending_sync: Dict[str, ProductVariantEditor] = {}

        logger.info("InventoryService initialized")

    # ====================
    # Inventory Table
    # ====================

    async def list_inventory_rows(self) -> List[InventoryRow]:
        """Products joined with their inventory records, newest first"""
        try:
            products, records = await asyncio.gather(
                self.store.fetch_products(),
                self.store.fetch_inventory(),
            )
        except Exception as e:
            logger.error(f"Error loading inventory table: {e}")
            raise

        by_product = {record.product_id: record for record in records}
        rows = []
        for product in products:
            inventory = by_product.get(product.id) or self._default_inventory(product.id)
            types = self.get_variant_types(product)
            rows.append(InventoryRow(
                product=product,
                inventory=inventory,
                status=inventory.status,
                available=inventory.available,
                variant_count=variant_count(types),
                variant_types=types,
            ))
        return rows

    async def get_summary(self) -> InventorySummary:
        rows = await self.list_inventory_rows()
        return InventorySummary(
            total_products=len(rows),
            in_stock=sum(1 for row in rows if row.status == StockStatus.IN_STOCK),
            low_stock=sum(1 for row in rows if row.status == StockStatus.LOW_STOCK),
            out_of_stock=sum(1 for row in rows if row.status == StockStatus.OUT_OF_STOCK),
            total_units=sum(row.inventory.stock for row in rows),
        )

    async def get_product(self, product_id: str) -> Product:
        products = await self.store.fetch_products()
        for product in products:
            if product.id == product_id:
                return product
        raise ProductNotFoundError(f"Product {product_id} not found")

    def get_variant_types(self, product: Product) -> List[VariantType]:
        """Variant types from the last committed session, else the legacy fields"""
        cached = self._variant_types.get(product.id)
        if cached is not None:
            return [vt.model_copy(deep=True) for vt in cached]
        return seed_variant_types(product)

    def preview_combinations(self, variant_types: List[VariantTypeInput]) -> CombinationPreviewResponse:
        """Combinations the editor grid would show for the given types"""
        types = [VariantType(name=vt.name, values=vt.values) for vt in variant_types]
        combinations = generate_combinations(types)
        return CombinationPreviewResponse(
            combinations=[
                CombinationPreview(combination=combo, label=format_combination(combo))
                for combo in combinations
            ],
            count=len(combinations),
            uses_variant_grid=count_combinations(types) > 1,
        )

    # ====================
    # Editing Sessions
    # ====================

    async def open_editor(self, product_id: Optional[str] = None) -> ProductVariantEditor:
        """Open an editing session, for a new product when product_id is None"""
        if product_id is None:
            return ProductVariantEditor(self.store, config=self.config).open()

        product = await self.get_product(product_id)
        inventory = await self.store.get_inventory(product_id)
        editor = ProductVariantEditor(
            self.store,
            product=product,
            inventory=inventory,
            variant_types=self._variant_types.get(product_id),
            variant_stock=self._variant_stock.get(product_id),
            config=self.config,
        )
        return editor.open()

    async def commit_editor(self, editor: ProductVariantEditor) -> CommitResult:
        """
        Commit an editing session and publish its outcome.

        Raises:
            ProductStoreError: Product write failed
            InventorySyncPendingError: Product saved, stock write pending retry
        """
        is_new = editor.is_new
        try:
            result = await editor.commit()
        except InventorySyncPendingError as e:
            self._remember_variants(editor)
            self._pending_sync[e.product_id] = editor
            await publish_sync_pending(
                self.event_bus,
                product_id=e.product_id,
                stock=e.stock,
                error_message=e.reason,
            )
            raise

        await self._after_commit(editor, result, is_new)
        return result

    async def apply_variant_edit(
        self, product_id: str, request: VariantCommitRequest
    ) -> CommitResult:
        """Replace an existing product's basics, variant types and stock, then commit"""
        editor = await self.open_editor(product_id)
        self._apply_request(editor, request)
        return await self.commit_editor(editor)

    async def create_product(self, request: VariantCommitRequest) -> CommitResult:
        """Create a product with its variant types and stock"""
        if not (request.basics.name or "").strip():
            raise EditorValidationError("Product name is required", field="name")
        editor = await self.open_editor()
        self._apply_request(editor, request)
        return await self.commit_editor(editor)

    async def retry_inventory_sync(self, product_id: str) -> CommitResult:
        """Re-attempt the stock write of a partially committed session"""
        editor = self._pending_sync.get(product_id)
        if editor is None:
            raise ProductNotFoundError(f"No pending inventory sync for product {product_id}")

        try:
            result = await editor.retry_inventory_sync()
        except InventorySyncPendingError as e:
            await publish_sync_pending(
                self.event_bus,
                product_id=e.product_id,
                stock=e.stock,
                error_message=e.reason,
                metadata={"retry": True},
            )
            raise

        await self._after_commit(editor, result, is_new=False)
        return result

    def pending_inventory_syncs(self) -> List[InventoryItem]:
        return [
            editor.pending_inventory_sync
            for editor in self._pending_sync.values()
            if editor.pending_inventory_sync is not None
        ]

    def _apply_request(self, editor: ProductVariantEditor, request: VariantCommitRequest) -> None:
        editor.update_basics(request.basics)
        if request.images is not None:
            editor.replace_images(request.images)

        for variant_type in list(editor.variant_types):
            editor.remove_variant_type(variant_type.id)
        for type_input in request.variant_types:
            created = editor.add_variant_type(type_input.name)
            for value in type_input.values:
                editor.add_value(created.id, value)

        for stock_input in request.stock:
            editor.set_stock(stock_input.variant_combination, stock_input.stock)

    async def _after_commit(
        self, editor: ProductVariantEditor, result: CommitResult, is_new: bool
    ) -> None:
        product_id = result.product.id
        self._remember_variants(editor)
        self._pending_sync.pop(product_id, None)

        await publish_variants_saved(
            self.event_bus,
            product_id=product_id,
            product_name=result.product.name,
            total_stock=result.total_stock,
            variant_types=[vt.model_dump() for vt in result.variant_types],
            combination_count=len(result.variant_stock),
            is_new=is_new,
        )
        if result.inventory is not None and result.inventory.is_low_stock:
            await publish_low_stock(
                self.event_bus,
                product_id=product_id,
                stock=result.inventory.stock,
                low_stock_threshold=result.inventory.low_stock_threshold,
            )
        editor.close()

    def _remember_variants(self, editor: ProductVariantEditor) -> None:
        if editor.product is None:
            return
        product_id = editor.product.id
        self._variant_types[product_id] = [vt.model_copy(deep=True) for vt in editor.variant_types]
        self._variant_stock[product_id] = editor.variant_stock()

    # ====================
    # Stock Operations
    # ====================

    async def quick_update_stock(self, product_id: str, stock: int) -> InventoryItem:
        """Write a product's aggregate stock directly from the table"""
        if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
            raise InvalidStockError(f"Stock must be a non-negative integer, got {stock!r}")

        previous = await self.store.get_inventory(product_id)
        try:
            inventory = await self.store.save_inventory_total(product_id, stock)
        except ProductStoreError as e:
            logger.error(f"Error updating stock for {product_id}: {e}")
            raise

        # The per-combination breakdown no longer adds up to the aggregate
        self._variant_stock.pop(product_id, None)

        await publish_stock_updated(
            self.event_bus,
            product_id=product_id,
            new_stock=inventory.stock,
            previous_stock=previous.stock if previous else None,
            reason="quick_update",
        )
        if inventory.is_low_stock:
            await publish_low_stock(
                self.event_bus,
                product_id=product_id,
                stock=inventory.stock,
                low_stock_threshold=inventory.low_stock_threshold,
            )
        return inventory

    async def reserve_stock(self, product_id: str, quantity: int) -> InventoryItem:
        """Hold units for a pending sale"""
        self._check_quantity(quantity)
        inventory = await self._require_inventory(product_id)
        if inventory.available < quantity:
            raise InsufficientStockError(product_id, quantity, inventory.available)

        updated = await self._update(product_id, {"reserved": inventory.reserved + quantity})
        await publish_stock_movement(
            self.event_bus,
            EventType.INVENTORY_RESERVED,
            product_id=product_id,
            quantity=quantity,
            stock=updated.stock,
            reserved=updated.reserved,
        )
        return updated

    async def release_stock(self, product_id: str, quantity: int) -> InventoryItem:
        """Return held units; reserved never drops below zero"""
        self._check_quantity(quantity)
        inventory = await self._require_inventory(product_id)

        updated = await self._update(product_id, {"reserved": max(0, inventory.reserved - quantity)})
        await publish_stock_movement(
            self.event_bus,
            EventType.INVENTORY_RELEASED,
            product_id=product_id,
            quantity=quantity,
            stock=updated.stock,
            reserved=updated.reserved,
        )
        return updated

    async def confirm_sale(self, product_id: str, quantity: int) -> InventoryItem:
        """Take sold units out of both stock and reserved"""
        self._check_quantity(quantity)
        inventory = await self._require_inventory(product_id)

        updated = await self._update(product_id, {
            "stock": max(0, inventory.stock - quantity),
            "reserved": max(0, inventory.reserved - quantity),
        })
        self._variant_stock.pop(product_id, None)

        await publish_stock_movement(
            self.event_bus,
            EventType.INVENTORY_SALE_CONFIRMED,
            product_id=product_id,
            quantity=quantity,
            stock=updated.stock,
            reserved=updated.reserved,
        )
        if updated.is_low_stock:
            await publish_low_stock(
                self.event_bus,
                product_id=product_id,
                stock=updated.stock,
                low_stock_threshold=updated.low_stock_threshold,
            )
        return updated

    async def check_availability(self, product_id: str, quantity: int) -> AvailabilityResponse:
        self._check_quantity(quantity)
        inventory = await self.store.get_inventory(product_id)
        if inventory is None:
            # Untracked products are sold without a stock check
            return AvailabilityResponse(
                product_id=product_id,
                quantity=quantity,
                available=True,
                metadata={"tracked": False},
            )
        return AvailabilityResponse(
            product_id=product_id,
            quantity=quantity,
            available=inventory.available >= quantity,
            metadata={"tracked": True, "available_stock": inventory.available},
        )

    async def get_low_stock(self) -> List[InventoryItem]:
        records = await self.store.fetch_inventory()
        return [record for record in records if record.is_low_stock]

    # ====================
    # Helpers
    # ====================

    def _default_inventory(self, product_id: str) -> InventoryItem:
        return InventoryItem(
            product_id=product_id,
            stock=0,
            reserved=0,
            low_stock_threshold=self.config.default_low_stock_threshold,
        )

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidStockError(f"Quantity must be a positive integer, got {quantity!r}")

    async def _require_inventory(self, product_id: str) -> InventoryItem:
        inventory = await self.store.get_inventory(product_id)
        if inventory is None:
            raise ProductNotFoundError(f"No inventory record for product {product_id}")
        return inventory

    async def _update(self, product_id: str, updates: Dict[str, int]) -> InventoryItem:
        updated = await self.store.update_inventory(product_id, updates)
        if updated is None:
            raise ProductNotFoundError(f"No inventory record for product {product_id}")
        return updated
