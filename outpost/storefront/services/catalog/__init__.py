"""
Catalog-related service helpers (authoritative implementation).
"""

from .color_service import (
    FALLBACK_HEX,
    ColorResolver,
    first_triplet,
    load_rgb_lookup,
    normalize_hex_code,
)
from .variant_index import (
    ColorSwatch,
    PriceRange,
    ProductGroup,
    ProductUnavailable,
    build_product_group,
    get_product_group,
    invalidate_all_product_groups,
    invalidate_product_group,
    parse_price,
)

__all__ = [
    "FALLBACK_HEX",
    "ColorResolver",
    "first_triplet",
    "load_rgb_lookup",
    "normalize_hex_code",
    "ColorSwatch",
    "PriceRange",
    "ProductGroup",
    "ProductUnavailable",
    "build_product_group",
    "get_product_group",
    "invalidate_all_product_groups",
    "invalidate_product_group",
    "parse_price",
]
