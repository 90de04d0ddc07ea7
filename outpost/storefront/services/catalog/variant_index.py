"""
Groups flat variant rows into a product's colour x size matrix.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence

from django.apps import apps
from django.conf import settings

from cache_utils import bump_generation, get_fragment_cache, get_generation

from .color_service import ColorResolver

logger = logging.getLogger(__name__)

PRODUCT_GROUP_CACHE_KEY = "catalog:product_group:{generation}:{style_code}"
PRODUCT_GROUP_GENERATION_KEY = "catalog:product_group:generation"
CURRENCY_SYMBOL = "£"


class ProductUnavailable(Exception):
    """Raised when a style has no live (non-discontinued) variants."""

    def __init__(self, style_code: str):
        self.style_code = style_code
        super().__init__(f"Product {style_code!r} has no live variants")


def parse_price(raw) -> Optional[Decimal]:
    """
    Parses a feed price string; blank, zero, negative or garbage -> ``None``.
    """
    if raw is None:
        return None
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


@dataclass(frozen=True)
class PriceRange:
    min: Decimal
    max: Decimal

    @classmethod
    def from_prices(cls, prices: Iterable[Optional[Decimal]]) -> Optional["PriceRange"]:
        valid = [price for price in prices if price is not None]
        if not valid:
            return None
        return cls(min=min(valid), max=max(valid))

    @property
    def is_exact(self) -> bool:
        return self.min == self.max

    def format(self) -> str:
        if self.is_exact:
            return f"{CURRENCY_SYMBOL}{self.min:.2f}"
        return f"{CURRENCY_SYMBOL}{self.min:.2f} - {CURRENCY_SYMBOL}{self.max:.2f}"

    def as_dict(self) -> dict:
        return {"min": str(self.min), "max": str(self.max), "label": self.format()}


@dataclass(frozen=True)
class ColorSwatch:
    code: str
    name: str
    hex: str
    image: str


@dataclass
class ProductGroup:
    """
    Aggregate view of one style: live variants, swatches and overall price range.

    Only live variants are kept; every swatch code has at least one of them.
    """

    style_code: str
    style_name: str
    brand: str
    size_range: str
    variants: List = field(default_factory=list)
    colors: List[ColorSwatch] = field(default_factory=list)
    price_range: Optional[PriceRange] = None

    def swatch(self, colour_code: str) -> Optional[ColorSwatch]:
        return next((c for c in self.colors if c.code == colour_code), None)

    def variants_for_colour(self, colour_code: str) -> List:
        return [v for v in self.variants if v.colour_code == colour_code]

    def available_sizes(self, colour_code: str) -> List[str]:
        seen: List[str] = []
        for variant in self.variants_for_colour(colour_code):
            if variant.size_code and variant.size_code not in seen:
                seen.append(variant.size_code)
        return seen

    def color_price_range(self, colour_code: str) -> Optional[PriceRange]:
        """
        Price range of one colour; falls back to the overall range when
        none of its variants carries a usable price.
        """
        colour_range = PriceRange.from_prices(
            parse_price(v.single_price) for v in self.variants_for_colour(colour_code)
        )
        return colour_range or self.price_range

    def resolve_variant(self, colour_code: Optional[str], size_code: Optional[str] = None):
        """
        Exact (colour, size) match, else any variant of the colour, else the
        first live variant. Sizes legitimately differ per colour, so a missing
        combination is never an error.
        """
        colour_variants = self.variants_for_colour(colour_code) if colour_code else []
        if size_code:
            exact = next((v for v in colour_variants if v.size_code == size_code), None)
            if exact is not None:
                return exact
        if colour_variants:
            return colour_variants[0]
        return self.variants[0]

    def current_price(self, colour_code: Optional[str], size_code: Optional[str] = None) -> Optional[PriceRange]:
        if size_code:
            variant = self.resolve_variant(colour_code, size_code)
            price = parse_price(variant.single_price)
            if price is not None and variant.size_code == size_code:
                return PriceRange(min=price, max=price)
        if colour_code:
            return self.color_price_range(colour_code)
        return self.price_range


def build_product_group(
    variants: Sequence,
    resolver: Optional[ColorResolver] = None,
    *,
    style_code: str = "",
) -> ProductGroup:
    """
    Build the `ProductGroup` for one style from its raw variant rows.

    Args:
        variants: All rows of the style, in catalog order.
        resolver: Colour resolver; an empty-table resolver is used if omitted.
        style_code: Used for the error when ``variants`` is empty.

    Raises:
        ProductUnavailable: no live variant exists.
    """
    resolver = resolver or ColorResolver()
    live = [v for v in variants if not v.is_discontinued]
    if not live:
        raise ProductUnavailable(style_code or (variants[0].style_code if variants else ""))

    first = live[0]
    swatches: List[ColorSwatch] = []
    seen_codes = set()
    for variant in live:
        if variant.colour_code in seen_codes:
            continue
        seen_codes.add(variant.colour_code)
        swatches.append(
            ColorSwatch(
                code=variant.colour_code,
                name=variant.colour_name or variant.colour_code,
                hex=resolver.resolve(variant.rgb, variant.colour_name),
                image=variant.swatch_image,
            )
        )

    return ProductGroup(
        style_code=first.style_code,
        style_name=first.style_name,
        brand=first.brand,
        size_range=first.size_range,
        variants=live,
        colors=swatches,
        price_range=PriceRange.from_prices(parse_price(v.single_price) for v in live),
    )


def product_group_cache_key(style_code: str, cache_backend=None) -> str:
    """
    Keys carry a generation number so a lookup-table change can drop every
    cached group at once without knowing which styles are cached.
    """
    cache_backend = cache_backend or get_fragment_cache()
    generation = get_generation(PRODUCT_GROUP_GENERATION_KEY, cache_backend)
    return PRODUCT_GROUP_CACHE_KEY.format(style_code=style_code, generation=generation)


def get_product_group(style_code: str, cache_backend=None) -> ProductGroup:
    """
    Cached `ProductGroup` for a style code.

    Raises:
        ProductUnavailable: the style is unknown or fully discontinued.
    """
    cache_backend = cache_backend or get_fragment_cache()
    cache_key = product_group_cache_key(style_code, cache_backend)
    group = cache_backend.get(cache_key)
    if group is not None:
        logger.debug("Product group cache hit for %s", style_code)
        return group

    ProductVariant = apps.get_model("storefront", "ProductVariant")
    variants = list(ProductVariant.objects.for_style(style_code))
    group = build_product_group(variants, ColorResolver.from_database(cache_backend), style_code=style_code)

    timeout = getattr(settings, "CUSTOMIZER", {}).get("PRODUCT_GROUP_CACHE_TIMEOUT", 600)
    cache_backend.set(cache_key, group, timeout)
    return group


def invalidate_product_group(style_code: str, cache_backend=None) -> None:
    cache_backend = cache_backend or get_fragment_cache()
    cache_backend.delete(product_group_cache_key(style_code, cache_backend))


def invalidate_all_product_groups(cache_backend=None) -> None:
    bump_generation(PRODUCT_GROUP_GENERATION_KEY, cache_backend)
