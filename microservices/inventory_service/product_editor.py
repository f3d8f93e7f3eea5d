"""
Product Variant Editor

Editing session for one product in the admin inventory screen. The session
owns a working copy of the product basics, its variant types and a stock
ledger, and commits them to the table store as one logical unit.

States:
    viewing -> editing_basics <-> editing_variants -> saving -> saved | save_failed

The operator-facing API takes and returns combinations keyed by variant type
name. Internally the ledger is keyed by variant type id, so renaming a type
keeps its stock.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config.boutique_config import InventoryConfig

from .models import (
    Combination,
    CommitResult,
    EditorState,
    InventoryItem,
    LEGACY_AXIS_BINDINGS,
    Product,
    ProductBasicsUpdate,
    ProductImage,
    VariantStockEntry,
    VariantType,
)
from .protocols import (
    EditorValidationError,
    InvalidEditorStateError,
    InvalidStockError,
    InventorySyncPendingError,
    ProductStoreError,
    ProductStoreProtocol,
)
from .variant_engine import count_combinations, format_combination, generate_combinations
from .variant_ledger import VariantStockLedger

logger = logging.getLogger(__name__)

_EDITABLE_STATES = (
    EditorState.EDITING_BASICS,
    EditorState.EDITING_VARIANTS,
    EditorState.SAVE_FAILED,
)

_BASIC_FIELDS = (
    "name",
    "description",
    "price",
    "category",
    "image_url",
    "brand",
    "is_featured",
    "is_whatsapp_only",
)


def seed_variant_types(product: Product) -> List[VariantType]:
    """Variant types implied by a product's legacy sizes / colors fields"""
    types = []
    for name, field in LEGACY_AXIS_BINDINGS.items():
        values = getattr(product, field) or []
        if values:
            types.append(VariantType(id=f"{field}-{product.id}", name=name, values=list(values)))
    return types


def project_legacy_axes(variant_types: List[VariantType]) -> Dict[str, List[str]]:
    """Legacy product fields projected from the bound variant types"""
    by_name = {vt.name: vt for vt in variant_types}
    return {
        field: list(by_name[name].values) if name in by_name else []
        for name, field in LEGACY_AXIS_BINDINGS.items()
    }


class ProductVariantEditor:
    """Editing session for one product's basics, variants and stock"""

    def __init__(
        self,
        store: ProductStoreProtocol,
        product: Optional[Product] = None,
        inventory: Optional[InventoryItem] = None,
        variant_types: Optional[List[VariantType]] = None,
        variant_stock: Optional[List[VariantStockEntry]] = None,
        config: Optional[InventoryConfig] = None,
    ):
        """
        Args:
            store: Table store the session commits to
            product: Product being edited, None to create a new one
            inventory: Prior inventory snapshot for the product
            variant_types: Variant types kept from an earlier session
            variant_stock: Name-keyed stock entries kept from an earlier session
            config: Inventory settings
        """
        self.store = store
        self.config = config or InventoryConfig()
        self.product = product
        self.inventory = inventory
        self._seed_types = variant_types
        self._seed_stock = variant_stock

        self.state = EditorState.VIEWING
        self.basics: Dict[str, Any] = {}
        self.images: List[ProductImage] = []
        self.variant_types: List[VariantType] = []
        self.ledger = VariantStockLedger(self._owner_id)

        self.pending_inventory_sync: Optional[InventoryItem] = None
        self.last_error: Optional[str] = None
        self._committed_stock: Optional[VariantStockLedger] = None

    @property
    def is_new(self) -> bool:
        return self.product is None

    @property
    def _owner_id(self) -> str:
        return self.product.id if self.product else self.config.new_product_placeholder

    # ====================
    # Lifecycle
    # ====================

    def open(self) -> "ProductVariantEditor":
        """Seed the working copy and start editing"""
        if self.state != EditorState.VIEWING:
            raise InvalidEditorStateError("Editor is already open", self.state.value)

        product = self.product
        self.basics = {
            "name": product.name if product else "",
            "description": product.description if product else "",
            "price": product.price if product else 0,
            "category": product.category if product else "General",
            "image_url": product.image_url if product else "",
            "brand": product.brand if product else None,
            "is_featured": product.is_featured if product else False,
            "is_whatsapp_only": product.is_whatsapp_only if product else False,
        }
        self.images = [img.model_copy() for img in product.images] if product else []

        if product is None:
            self.variant_types = []
        elif self._seed_types is not None:
            self.variant_types = [vt.model_copy(deep=True) for vt in self._seed_types]
        else:
            self.variant_types = seed_variant_types(product)

        self.ledger = VariantStockLedger(self._owner_id)
        if self._seed_stock is not None:
            for entry in self._seed_stock:
                seeded = self.ledger.set_stock(self._to_internal(entry.variant_combination), entry.stock)
                seeded.id = entry.id
                seeded.reserved = entry.reserved
        elif self.inventory is not None and not self.uses_variant_grid:
            # Simple SKU: the aggregate is the flat entry
            self.ledger.set_stock({}, self.inventory.stock)

        self.state = EditorState.EDITING_BASICS
        logger.info(
            f"Opened editor for {'new product' if self.is_new else self.product.id} "
            f"with {len(self.variant_types)} variant types"
        )
        return self

    def edit_basics(self) -> None:
        self._enter(EditorState.EDITING_BASICS, "edit basics")

    def edit_variants(self) -> None:
        self._enter(EditorState.EDITING_VARIANTS, "edit variants")

    def close(self) -> None:
        """Close the editor; the working copy is discarded by the caller"""
        if self.state == EditorState.SAVING:
            raise InvalidEditorStateError("Cannot close while saving", self.state.value)
        self.state = EditorState.VIEWING

    # ====================
    # Basics
    # ====================

    def update_basics(self, update: ProductBasicsUpdate) -> None:
        changes = update.model_dump(exclude_none=True)
        if "name" in changes and not changes["name"].strip():
            raise EditorValidationError("Product name is required", field="name")
        self._enter(EditorState.EDITING_BASICS, "edit basics")
        self.basics.update({k: v for k, v in changes.items() if k in _BASIC_FIELDS})

    def add_image(self, url: str, color: Optional[str] = None) -> ProductImage:
        url = (url or "").strip()
        if not url:
            raise EditorValidationError("Image URL is required", field="images")
        self._enter(EditorState.EDITING_BASICS, "edit images")
        image = ProductImage(
            url=url,
            color=color or None,
            is_primary=len(self.images) == 0,
            order=len(self.images),
        )
        self.images.append(image)
        return image

    def remove_image(self, index: int) -> ProductImage:
        self._check_image_index(index)
        self._enter(EditorState.EDITING_BASICS, "edit images")
        return self.images.pop(index)

    def set_primary_image(self, index: int) -> None:
        self._check_image_index(index)
        self._enter(EditorState.EDITING_BASICS, "edit images")
        for position, image in enumerate(self.images):
            image.is_primary = position == index

    def replace_images(self, images: List[ProductImage]) -> None:
        self._enter(EditorState.EDITING_BASICS, "edit images")
        self.images = [img.model_copy() for img in images]

    # ====================
    # Variant Types
    # ====================

    def add_variant_type(self, name: str) -> VariantType:
        name = self._clean_type_name(name)
        self._enter(EditorState.EDITING_VARIANTS, "add variant type")
        variant_type = VariantType(name=name, values=[])
        self.variant_types.append(variant_type)
        return variant_type

    def remove_variant_type(self, type_id: str) -> VariantType:
        """Remove a type and every stock entry that uses it"""
        variant_type = self._get_type(type_id)
        self._enter(EditorState.EDITING_VARIANTS, "remove variant type")
        self.variant_types = [vt for vt in self.variant_types if vt.id != type_id]
        removed = self.ledger.remove_axis(variant_type.id)
        logger.debug(f"Removed variant type {variant_type.name} and {removed} stock entries")
        return variant_type

    def rename_variant_type(self, type_id: str, name: str) -> VariantType:
        variant_type = self._get_type(type_id)
        name = self._clean_type_name(name, exclude_id=type_id)
        self._enter(EditorState.EDITING_VARIANTS, "rename variant type")
        variant_type.name = name
        return variant_type

    def add_value(self, type_id: str, value: str) -> VariantType:
        variant_type = self._get_type(type_id)
        value = (value or "").strip()
        if not value:
            raise EditorValidationError("Variant value is required", field="values")
        if value in variant_type.values:
            raise EditorValidationError(
                f"Value {value!r} already exists in {variant_type.name}", field="values"
            )
        self._enter(EditorState.EDITING_VARIANTS, "add variant value")
        variant_type.values.append(value)
        return variant_type

    def remove_value(self, type_id: str, value: str) -> VariantType:
        """Remove a value and the stock entries of combinations that used it"""
        variant_type = self._get_type(type_id)
        if value not in variant_type.values:
            raise EditorValidationError(
                f"Value {value!r} not found in {variant_type.name}", field="values"
            )
        self._enter(EditorState.EDITING_VARIANTS, "remove variant value")
        variant_type.values = [v for v in variant_type.values if v != value]
        self.ledger.remove_value(variant_type.id, value)
        return variant_type

    # ====================
    # Stock
    # ====================

    def combinations(self) -> List[Combination]:
        return generate_combinations(self.variant_types)

    @property
    def uses_variant_grid(self) -> bool:
        """Per-combination grid when there is more than one combination"""
        return count_combinations(self.variant_types) > 1

    def live_combinations(self) -> List[Combination]:
        """Combinations whose stock counts towards the aggregate"""
        return self.combinations() if self.uses_variant_grid else [{}]

    def get_stock(self, combo: Combination) -> int:
        if combo and not self.uses_variant_grid and combo in self.combinations():
            combo = {}
        return self.ledger.get_stock(self._to_internal(combo))

    def set_stock(self, combo: Combination, stock: int) -> VariantStockEntry:
        if isinstance(stock, bool) or not isinstance(stock, int):
            raise InvalidStockError(f"Stock must be an integer, got {stock!r}")
        if stock < 0:
            raise InvalidStockError(f"Stock cannot be negative, got {stock}")
        combo = self._live_combination(combo)
        self._enter(EditorState.EDITING_VARIANTS, "edit stock")
        return self.ledger.set_stock(self._to_internal(combo), stock)

    def total_stock(self) -> int:
        return self._live_ledger().total_stock()

    def format(self, combo: Combination) -> str:
        return format_combination(combo)

    def variant_stock(self) -> List[VariantStockEntry]:
        """All working stock entries, keyed by variant type name"""
        return [self._to_external_entry(entry) for entry in self.ledger.entries]

    # ====================
    # Commit
    # ====================

    def build_product(self, product_id: str) -> Product:
        images = [img.model_copy() for img in self.images]
        primary = next((img for img in images if img.is_primary), None)
        image_url = (
            self.basics.get("image_url")
            or (primary.url if primary else "")
            or (images[0].url if images else "")
        )
        fields = {**self.basics, "image_url": image_url}
        return Product(
            id=product_id,
            images=images,
            created_at=self.product.created_at if self.product else None,
            **fields,
            **project_legacy_axes(self.variant_types),
        )

    def build_inventory(self, product_id: str, total: int) -> InventoryItem:
        prior = self.inventory
        return InventoryItem(
            product_id=product_id,
            stock=total if total > 0 else 0,
            reserved=prior.reserved if prior else 0,
            low_stock_threshold=(
                prior.low_stock_threshold if prior else self.config.default_low_stock_threshold
            ),
            last_updated=datetime.now(timezone.utc),
        )

    async def commit(self) -> CommitResult:
        """
        Write the product, then its aggregate stock.

        Raises:
            EditorValidationError: Product name missing (no state change)
            ProductStoreError: Product write failed, nothing committed
            InventorySyncPendingError: Product written, inventory write failed
        """
        self._require_editable("save")
        if not str(self.basics.get("name") or "").strip():
            raise EditorValidationError("Product name is required", field="name")

        self.state = EditorState.SAVING
        product_id = self.product.id if self.product else str(uuid.uuid4())

        live = self._live_ledger()
        live.assign_product(product_id)
        inventory = self.build_inventory(product_id, live.total_stock())
        product = self.build_product(product_id)

        try:
            saved_product = await self._store_call(
                f"Saving product {product_id}", self.store.save_product(product)
            )
            if saved_product is None:
                raise ProductStoreError(f"Product {product_id} could not be saved")
        except ProductStoreError as e:
            self._fail(str(e))
            raise

        # The product write is committed from here on
        self.product = saved_product
        self.ledger.assign_product(saved_product.id)
        live.assign_product(saved_product.id)
        inventory = inventory.model_copy(update={"product_id": saved_product.id})
        self._committed_stock = live

        return await self._write_inventory(inventory)

    async def retry_inventory_sync(self) -> CommitResult:
        """Re-attempt only the inventory write after a partial commit"""
        if self.pending_inventory_sync is None:
            raise InvalidEditorStateError("No inventory sync pending", self.state.value)
        self._require_editable("retry inventory sync")
        self.state = EditorState.SAVING
        return await self._write_inventory(self.pending_inventory_sync)

    async def _write_inventory(self, inventory: InventoryItem) -> CommitResult:
        try:
            saved_inventory = await self._store_call(
                f"Saving inventory for {inventory.product_id}",
                self.store.save_inventory_total(inventory.product_id, inventory.stock),
            )
        except ProductStoreError as e:
            self.pending_inventory_sync = inventory
            self._fail(str(e))
            raise InventorySyncPendingError(inventory.product_id, inventory.stock, str(e)) from e

        if saved_inventory is not None:
            inventory = inventory.model_copy(update={
                "stock": saved_inventory.stock,
                "last_updated": saved_inventory.last_updated or inventory.last_updated,
            })
        self.inventory = inventory
        self.pending_inventory_sync = None
        self.last_error = None
        self.state = EditorState.SAVED
        logger.info(f"Saved product {inventory.product_id} with stock {inventory.stock}")

        committed = self._committed_stock or self._live_ledger()
        return CommitResult(
            status=EditorState.SAVED,
            product=self.product,
            inventory=inventory,
            variant_types=[vt.model_copy(deep=True) for vt in self.variant_types],
            variant_stock=[self._to_external_entry(e) for e in committed.entries],
            total_stock=inventory.stock,
        )

    async def _store_call(self, action: str, call):
        try:
            return await call
        except ProductStoreError:
            raise
        except Exception as e:
            raise ProductStoreError(f"{action} failed: {e}") from e

    def _fail(self, message: str) -> None:
        self.state = EditorState.SAVE_FAILED
        self.last_error = message
        logger.error(message)

    # ====================
    # Helpers
    # ====================

    def _require_editable(self, action: str) -> None:
        if self.state not in _EDITABLE_STATES:
            raise InvalidEditorStateError(
                f"Cannot {action} while editor is {self.state.value}", self.state.value
            )

    def _enter(self, state: EditorState, action: str) -> None:
        self._require_editable(action)
        self.state = state

    def _get_type(self, type_id: str) -> VariantType:
        for vt in self.variant_types:
            if vt.id == type_id:
                return vt
        raise EditorValidationError(f"Variant type {type_id} not found", field="variant_types")

    def _clean_type_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise EditorValidationError("Variant type name is required", field="name")
        for vt in self.variant_types:
            if vt.id != exclude_id and vt.name.casefold() == name.casefold():
                raise EditorValidationError(f"Variant type {name!r} already exists", field="name")
        return name

    def _live_combination(self, combo: Combination) -> Combination:
        """Resolve a name-keyed combination to the live combination it stocks.

        Without a grid the single full combination stands for the flat ``{}``
        entry; anything that is not a live combination is rejected.
        """
        by_name = {vt.name: vt for vt in self.variant_types}
        for name, value in combo.items():
            if name not in by_name:
                raise EditorValidationError(f"Unknown variant type {name!r}", field="variant_combination")
            if value not in by_name[name].values:
                raise EditorValidationError(
                    f"Value {value!r} is not defined for {name}", field="variant_combination"
                )

        if not combo:
            if self.uses_variant_grid:
                raise EditorValidationError(
                    "Stock must be set per combination for this product", field="variant_combination"
                )
            return {}

        missing = [vt.name for vt in self.variant_types if vt.name not in combo]
        if missing:
            raise EditorValidationError(
                f"Combination is missing {', '.join(missing)}", field="variant_combination"
            )
        return dict(combo) if self.uses_variant_grid else {}

    def _check_image_index(self, index: int) -> None:
        if not 0 <= index < len(self.images):
            raise EditorValidationError(f"No image at position {index}", field="images")

    def _live_ledger(self) -> VariantStockLedger:
        if self.uses_variant_grid:
            return self.ledger.restricted_to(generate_combinations(self.variant_types, key="id"))
        return self.ledger.restricted_to([{}])

    def _to_internal(self, combo: Combination) -> Combination:
        ids = {vt.name: vt.id for vt in self.variant_types}
        return {ids.get(k, k): v for k, v in combo.items()}

    def _to_external(self, combo: Combination) -> Combination:
        named = {vt.name: combo[vt.id] for vt in self.variant_types if vt.id in combo}
        known = {vt.id for vt in self.variant_types}
        named.update({k: v for k, v in combo.items() if k not in known})
        return named

    def _to_external_entry(self, entry: VariantStockEntry) -> VariantStockEntry:
        return entry.model_copy(update={
            "variant_combination": self._to_external(entry.variant_combination),
        })
