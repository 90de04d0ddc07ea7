"""
Adapter from the storefront session cart to customization lines.

The cart lives in ``request.session['cart']`` as a dict keyed by line id:

    {"<sku>": {"style_code": ..., "title": ..., "color": ..., "size": ...,
               "quantity": ..., "price": ..., "image": ...}}
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from storefront.services.catalog import ProductUnavailable, get_product_group

from .session import DEFAULT_LINE_COLOR, CartLine

logger = logging.getLogger(__name__)


def _colour_images(style_code: str, cache_backend=None) -> Dict[str, str]:
    if not style_code:
        return {}
    try:
        group = get_product_group(style_code, cache_backend)
    except ProductUnavailable:
        logger.info("Cart line style %s has no live variants; using cart image", style_code)
        return {}
    return {swatch.name: swatch.image for swatch in group.colors if swatch.image}


def line_from_item(line_id: str, item: Mapping, cache_backend=None) -> CartLine:
    style_code = str(item.get("style_code") or "")
    colour_images = _colour_images(style_code, cache_backend)
    colour = item.get("color") or DEFAULT_LINE_COLOR
    image = item.get("image") or colour_images.get(colour, "")
    return CartLine(
        line_id=str(line_id),
        name=item.get("title") or style_code or str(line_id),
        image=image,
        selected_color=colour,
        style_code=style_code,
        brand=item.get("brand") or "",
        color_images=colour_images,
    )


def lines_from_cart(cart: Optional[Mapping], cache_backend=None) -> List[CartLine]:
    """Cart lines in insertion order; an empty or missing cart gives ``[]``."""
    if not cart:
        return []
    return [line_from_item(line_id, item, cache_backend) for line_id, item in cart.items()]
