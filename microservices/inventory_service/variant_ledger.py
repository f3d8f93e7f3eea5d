"""
Variant Stock Ledger

Per-combination stock bookkeeping for one product during an editing session.
Entries are indexed by the canonical combination key, so there is at most one
entry per distinct combination. The ledger does not care whether combination
keys are variant type names or ids.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .models import Combination, VariantStockEntry
from .variant_engine import combination_key

logger = logging.getLogger(__name__)


class VariantStockLedger:
    """Working list of VariantStockEntry for the product being edited"""

    def __init__(
        self,
        product_id: str,
        entries: Optional[Iterable[VariantStockEntry]] = None,
    ):
        self.product_id = product_id
        self._entries: List[VariantStockEntry] = []
        self._index: Dict[str, int] = {}

        for entry in entries or []:
            key = combination_key(entry.variant_combination)
            seeded = entry.model_copy(deep=True)
            if key in self._index:
                logger.warning(f"Duplicate stock entry for {key!r}, keeping the last one")
                self._entries[self._index[key]] = seeded
            else:
                self._index[key] = len(self._entries)
                self._entries.append(seeded)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[VariantStockEntry]:
        return list(self._entries)

    def get_entry(self, combo: Combination) -> Optional[VariantStockEntry]:
        position = self._index.get(combination_key(combo))
        return self._entries[position] if position is not None else None

    def get_stock(self, combo: Combination) -> int:
        """Stock for a combination, 0 when it was never set"""
        entry = self.get_entry(combo)
        return entry.stock if entry else 0

    def set_stock(self, combo: Combination, stock: int) -> VariantStockEntry:
        """
        Set stock for a combination.

        Replaces the stock of the structurally equal entry in place (id and
        reserved are kept) or appends a new entry. Values are not clamped.
        """
        entry = self.get_entry(combo)
        if entry is not None:
            entry.stock = stock
            return entry

        entry = VariantStockEntry(
            product_id=self.product_id,
            variant_combination=dict(combo),
            stock=stock,
            reserved=0,
        )
        self._index[combination_key(combo)] = len(self._entries)
        self._entries.append(entry)
        return entry

    def remove_axis(self, axis: str) -> int:
        """Remove every entry whose combination uses the given key"""
        return self._remove_where(lambda e: axis in e.variant_combination)

    def remove_value(self, axis: str, value: str) -> int:
        """Remove every entry whose combination picks value for axis"""
        return self._remove_where(lambda e: e.variant_combination.get(axis) == value)

    def total_stock(self) -> int:
        """Sum of stock across all entries"""
        return sum(entry.stock for entry in self._entries)

    def restricted_to(self, combos: Iterable[Combination]) -> "VariantStockLedger":
        """Copy holding only the entries for the given combinations"""
        keep = {combination_key(combo) for combo in combos}
        return VariantStockLedger(
            self.product_id,
            [e for e in self._entries if combination_key(e.variant_combination) in keep],
        )

    def assign_product(self, product_id: str) -> None:
        """Point every entry at a product, e.g. once a new product has an id"""
        self.product_id = product_id
        for entry in self._entries:
            entry.product_id = product_id

    def _remove_where(self, predicate) -> int:
        before = len(self._entries)
        self._entries = [e for e in self._entries if not predicate(e)]
        self._reindex()
        return before - len(self._entries)

    def _reindex(self) -> None:
        self._index = {
            combination_key(entry.variant_combination): position
            for position, entry in enumerate(self._entries)
        }
