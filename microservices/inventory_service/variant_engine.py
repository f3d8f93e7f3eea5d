"""
Variant Combination Engine

Pure functions over variant types: expand them into every combination of
one value per type, count combinations, and render or key a combination.
No I/O, safe to call on every recompute.
"""

from itertools import product
from typing import List, Sequence
from urllib.parse import quote

from .models import Combination, VariantType


def generate_combinations(
    variant_types: Sequence[VariantType],
    key: str = "name",
) -> List[Combination]:
    """
    Expand variant types into their Cartesian product.

    The first type varies slowest and the last type fastest. No types yields
    a single empty combination (the base product); any type without values
    collapses the product to no combinations. Duplicate values are kept as
    distinct entries.

    Args:
        variant_types: Ordered variant types
        key: Attribute used as combination key, "name" or "id"

    Returns:
        List of combinations in deterministic order
    """
    axes = [getattr(vt, key) for vt in variant_types]
    return [
        dict(zip(axes, picked))
        for picked in product(*(vt.values for vt in variant_types))
    ]


def count_combinations(variant_types: Sequence[VariantType]) -> int:
    """Number of combinations generate_combinations would return"""
    count = 1
    for vt in variant_types:
        count *= len(vt.values)
    return count


def variant_count(variant_types: Sequence[VariantType]) -> int:
    """Variant count shown in the inventory table; empty types count as one"""
    if not variant_types:
        return 0
    count = 1
    for vt in variant_types:
        count *= len(vt.values) or 1
    return count


def format_combination(combo: Combination) -> str:
    """Render "Key1: Value1 | Key2: Value2" in the mapping's key order"""
    return " | ".join(f"{k}: {v}" for k, v in combo.items())


def combination_key(combo: Combination) -> str:
    """
    Canonical key for structural equality of combinations.

    Keys are sorted and each pair is percent-quoted, so two mappings with the
    same pairs produce the same key regardless of insertion order.
    """
    return "&".join(
        f"{quote(str(k), safe='')}={quote(str(v), safe='')}"
        for k, v in sorted(combo.items())
    )
