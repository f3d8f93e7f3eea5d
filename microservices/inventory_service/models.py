"""
Inventory Service Data Models

Products, aggregate inventory records and the variant model used by the
admin inventory editor: variant types (axes such as Talla or Color),
combinations of one value per axis, and per-combination stock entries.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


# A combination maps a variant axis to one of its values, e.g. {"Talla": "M", "Color": "Rojo"}
Combination = Dict[str, str]

# Variant type names that are projected onto legacy flat product fields
LEGACY_AXIS_BINDINGS: Dict[str, str] = {
    "Talla": "sizes",
    "Color": "colors",
}


def new_variant_type_id() -> str:
    return f"vt_{uuid.uuid4().hex[:12]}"


def new_stock_entry_id() -> str:
    return f"vs_{uuid.uuid4().hex[:12]}"


# ====================
# Enums
# ====================

class StockStatus(str, Enum):
    """Stock status shown in the inventory table"""
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


class EditorState(str, Enum):
    """States of a product variant editing session"""
    VIEWING = "viewing"
    EDITING_BASICS = "editing_basics"
    EDITING_VARIANTS = "editing_variants"
    SAVING = "saving"
    SAVED = "saved"
    SAVE_FAILED = "save_failed"


# ====================
# Variant Models
# ====================

class VariantType(BaseModel):
    """A named axis of product variation"""
    id: str = Field(default_factory=new_variant_type_id, description="Session-stable identifier")
    name: str = Field(..., description="Display label, e.g. Talla or Color")
    values: List[str] = Field(default_factory=list, description="Allowed values, in display order")


class VariantStockEntry(BaseModel):
    """Stock held for one specific combination of variant values"""
    id: str = Field(default_factory=new_stock_entry_id)
    product_id: str
    variant_combination: Combination = Field(default_factory=dict)
    stock: int = 0
    reserved: int = Field(default=0, ge=0)


# ====================
# Core Models
# ====================

class InventoryItem(BaseModel):
    """Aggregate stock record, one per product"""
    product_id: str
    stock: int = Field(default=0, ge=0)
    reserved: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    last_updated: Optional[datetime] = None

    @property
    def available(self) -> int:
        return self.stock - self.reserved

    @property
    def status(self) -> StockStatus:
        available = self.available
        if available <= 0:
            return StockStatus.OUT_OF_STOCK
        if available <= self.low_stock_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold


class ProductImage(BaseModel):
    """Gallery image, optionally bound to a color value"""
    url: str
    color: Optional[str] = None
    is_primary: bool = False
    order: int = 0


class Product(BaseModel):
    """Catalog product"""
    id: str
    name: str
    description: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    image_url: str = ""
    images: List[ProductImage] = Field(default_factory=list)
    category: str = "General"
    brand: Optional[str] = None

    # Legacy projections of the Talla / Color variant types
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)

    is_featured: bool = False
    is_whatsapp_only: bool = False
    created_at: Optional[datetime] = None


# ====================
# Request Models
# ====================

class ProductBasicsUpdate(BaseModel):
    """Editable product fields outside the variant grid"""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = None
    brand: Optional[str] = None
    is_featured: Optional[bool] = None
    is_whatsapp_only: Optional[bool] = None


class VariantTypeInput(BaseModel):
    """Variant type as submitted by the operator"""
    name: str
    values: List[str] = Field(default_factory=list)


class VariantStockInput(BaseModel):
    """Stock value for one combination, keyed by variant type names"""
    variant_combination: Combination = Field(default_factory=dict)
    stock: int


class VariantCommitRequest(BaseModel):
    """Full editor submission for one product"""
    basics: ProductBasicsUpdate = Field(default_factory=ProductBasicsUpdate)
    images: Optional[List[ProductImage]] = None
    variant_types: List[VariantTypeInput] = Field(default_factory=list)
    stock: List[VariantStockInput] = Field(default_factory=list)


class CombinationPreviewRequest(BaseModel):
    """Variant types to expand into combinations"""
    variant_types: List[VariantTypeInput] = Field(default_factory=list)


class StockUpdateRequest(BaseModel):
    """Quick edit of a product's aggregate stock"""
    stock: int = Field(..., ge=0)


class StockQuantityRequest(BaseModel):
    """Quantity for reserve / release / confirm operations"""
    quantity: int = Field(..., gt=0)


# ====================
# Response Models
# ====================

class CombinationPreview(BaseModel):
    combination: Combination
    label: str


class CombinationPreviewResponse(BaseModel):
    combinations: List[CombinationPreview] = Field(default_factory=list)
    count: int = 0
    uses_variant_grid: bool = False


class CommitResult(BaseModel):
    """Outcome of committing an editing session"""
    status: EditorState
    product: Optional[Product] = None
    inventory: Optional[InventoryItem] = None
    variant_types: List[VariantType] = Field(default_factory=list)
    variant_stock: List[VariantStockEntry] = Field(default_factory=list)
    total_stock: int = 0
    pending_inventory_sync: bool = False
    error: Optional[str] = None


class InventoryRow(BaseModel):
    """Read-only inventory table row"""
    product: Product
    inventory: InventoryItem
    status: StockStatus
    available: int
    variant_count: int = 0
    variant_types: List[VariantType] = Field(default_factory=list)


class InventorySummary(BaseModel):
    """Counts shown above the inventory table"""
    total_products: int = 0
    in_stock: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    total_units: int = 0


class AvailabilityResponse(BaseModel):
    product_id: str
    quantity: int
    available: bool
    metadata: Dict[str, Any] = Field(default_factory=dict)
