"""
Colour resolution: canonical swatch HEX for a variant from inconsistent feed data.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from django.apps import apps
from django.db import DatabaseError

from cache_utils import get_fragment_cache
from productcolors.models import normalize_rgb_text

logger = logging.getLogger(__name__)

HEX_RE = re.compile(r"^[0-9A-F]{6}$")

RGB_LOOKUP_CACHE_KEY = "productcolors:rgb_lookup"
RGB_LOOKUP_CACHE_TIMEOUT = 3600

TRIPLET_SEPARATOR = "|"
NOT_AVAILABLE = "not available"
FALLBACK_HEX = "#CCCCCC"

# Order matters: the first keyword found in the colour name wins.
NAME_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("black",), "#000000"),
    (("white",), "#FFFFFF"),
    (("red",), "#DC3545"),
    (("blue",), "#007BFF"),
    (("green",), "#28A745"),
    (("yellow",), "#FFC107"),
    (("grey", "gray"), "#6C757D"),
    (("navy",), "#001F3F"),
    (("orange",), "#FF6B35"),
    (("purple", "violet"), "#6F42C1"),
    (("pink",), "#E83E8C"),
    (("brown",), "#8B4513"),
    (("beige", "cream", "sand"), "#E8DCC4"),
    (("khaki", "olive"), "#807A4F"),
)


def normalize_hex_code(raw: Optional[str]) -> Optional[str]:
    """
    Normalise HEX values to the `#RRGGBB` format.

    Accepts values with/without leading '#', ignores whitespace, and returns
    ``None`` for empty inputs. Raises ValueError for invalid hex strings.
    """
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    if value.startswith("#"):
        value = value[1:]
    if not HEX_RE.fullmatch(value.upper()):
        raise ValueError(f"Invalid HEX colour value: {raw!r}")
    return f"#{value.upper()}"


def first_triplet(raw_rgb: Optional[str]) -> str:
    """
    Returns the first colour zone of a descriptor, whitespace-normalised.

    Multi-zone garments list one triplet per zone ("0 0 0|255 255 255");
    only the first is used for the swatch. "Not available" yields ''.
    """
    if not raw_rgb:
        return ""
    head = raw_rgb.split(TRIPLET_SEPARATOR, 1)[0]
    normalized = normalize_rgb_text(head)
    if normalized.lower() == NOT_AVAILABLE:
        return ""
    return normalized


def triplet_to_hex(triplet: str) -> Optional[str]:
    """
    Converts "R G B" to `#RRGGBB`, or ``None`` when it is not three valid channels.
    """
    parts = triplet.split(" ") if triplet else []
    if len(parts) < 3:
        return None
    channels = []
    for part in parts:
        try:
            channel = int(part, 10)
        except ValueError:
            return None
        if not 0 <= channel <= 255:
            return None
        channels.append(channel)
    red, green, blue = channels[:3]
    return f"#{red:02X}{green:02X}{blue:02X}"


def hex_from_colour_name(colour_name: Optional[str]) -> Optional[str]:
    """Best-effort guess from keywords in the colour name."""
    lowered = (colour_name or "").lower()
    if not lowered:
        return None
    for keywords, hex_value in NAME_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return hex_value
    return None


@dataclass(frozen=True)
class ColorResolver:
    """
    Resolves the display HEX for a variant colour.

    Fallback chain, first hit wins: lookup table for the first triplet,
    numeric parse of that triplet, keyword match on the colour name,
    neutral grey. The chain never changes order and never returns ``None``.
    """

    lookup: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {normalize_rgb_text(key): value for key, value in dict(self.lookup).items()}
        object.__setattr__(self, "lookup", MappingProxyType(frozen))

    @classmethod
    def from_database(cls, cache_backend=None) -> "ColorResolver":
        return cls(load_rgb_lookup(cache_backend))

    def resolve(self, raw_rgb: Optional[str], colour_name: Optional[str]) -> str:
        triplet = first_triplet(raw_rgb)

        if triplet and triplet in self.lookup:
            try:
                mapped = normalize_hex_code(self.lookup[triplet])
            except ValueError:
                logger.warning("Ignoring invalid lookup HEX %r for RGB %r", self.lookup[triplet], triplet)
                mapped = None
            if mapped:
                return mapped

        parsed = triplet_to_hex(triplet)
        if parsed:
            return parsed

        return hex_from_colour_name(colour_name) or FALLBACK_HEX


def load_rgb_lookup(cache_backend=None) -> Dict[str, str]:
    """
    Loads the `RgbValue` table as {normalised rgb text: hex}, cached.

    A database failure degrades to an empty table; swatches then fall back
    to numeric parsing instead of breaking the product page.
    """
    cache_backend = cache_backend or get_fragment_cache()
    lookup = cache_backend.get(RGB_LOOKUP_CACHE_KEY)
    if lookup is not None:
        return lookup

    RgbValue = apps.get_model("productcolors", "RgbValue")
    try:
        lookup = {
            normalize_rgb_text(rgb_text): hex_value
            for rgb_text, hex_value in RgbValue.objects.values_list("rgb_text", "hex")
            if rgb_text and hex_value
        }
    except DatabaseError as exc:
        logger.warning("Failed to load RGB lookup table: %s", exc, exc_info=exc)
        return {}

    cache_backend.set(RGB_LOOKUP_CACHE_KEY, lookup, RGB_LOOKUP_CACHE_TIMEOUT)
    return lookup
