"""
Unsaved `ProductVariant` rows for tests.
"""
from storefront.models import ProductVariant


def make_variant(sku, colour_code="BLK", colour_name="Black", size="M", price="10.00", status="Live", **extra):
    fields = {
        "sku_code": sku,
        "style_code": "ST001",
        "style_name": "Classic Tee",
        "brand": "Outpost",
        "colour_code": colour_code,
        "colour_name": colour_name,
        "rgb": extra.pop("rgb", ""),
        "size_code": size,
        "size_name": size,
        "size_range": "S - XL",
        "single_price": price,
        "sku_status": status,
        "colour_image": extra.pop("colour_image", f"https://cdn.example.com/{colour_code.lower()}.jpg"),
    }
    fields.update(extra)
    return ProductVariant(**fields)
