"""
API views - JSON endpoints for product pages.

Contains views for:
- Product group (swatches, sizes, price ranges) of a style
- RGB lookup table used for swatch colours
"""

import logging

from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from ..services.catalog import ProductUnavailable, get_product_group, load_rgb_lookup

logger = logging.getLogger(__name__)


def _price_payload(price_range):
    return price_range.as_dict() if price_range else None


def _variant_payload(variant):
    return {
        'sku_code': variant.sku_code,
        'colour_code': variant.colour_code,
        'colour_name': variant.colour_name,
        'size_code': variant.size_code,
        'size_name': variant.size_name,
        'single_price': variant.single_price,
        'primary_product_image_url': variant.primary_product_image_url,
        'back_image_url': variant.back_image_url,
        'side_image_url': variant.side_image_url,
        'additional_image_url': variant.additional_image_url,
        'fabric': variant.fabric,
        'washing_instructions': variant.washing_instructions,
        'accreditations': variant.accreditations,
    }


@require_http_methods(["GET"])
def product_group_json(request, style_code):
    """
    Product group of a style in JSON.

    Query params:
        colour: selected colour code (defaults to the first swatch)
        size: selected size code (optional)

    Returns:
        JsonResponse: swatches, sizes for the colour, price ranges and the
        variant resolved for the selection; 404 when the style has no
        live variants.
    """
    try:
        group = get_product_group(style_code)
    except ProductUnavailable:
        logger.info("Product %s requested but unavailable", style_code)
        return JsonResponse({
            'success': False,
            'error': 'Product unavailable'
        }, status=404)

    colour_code = request.GET.get('colour') or group.colors[0].code
    if group.swatch(colour_code) is None:
        colour_code = group.colors[0].code
    size_code = request.GET.get('size') or None

    variant = group.resolve_variant(colour_code, size_code)

    return JsonResponse({
        'success': True,
        'product': {
            'style_code': group.style_code,
            'style_name': group.style_name,
            'brand': group.brand,
            'size_range': group.size_range,
            'price_range': _price_payload(group.price_range),
            'colors': [
                {'code': c.code, 'name': c.name, 'hex': c.hex, 'image': c.image}
                for c in group.colors
            ],
        },
        'selection': {
            'colour': colour_code,
            'size': size_code,
            'sizes': group.available_sizes(colour_code),
            'colour_price_range': _price_payload(group.color_price_range(colour_code)),
            'price': _price_payload(group.current_price(colour_code, size_code)),
            'variant': _variant_payload(variant),
        },
    })


@require_http_methods(["GET"])
def rgb_values_json(request):
    """
    RGB text -> HEX lookup table.
    """
    lookup = load_rgb_lookup()
    return JsonResponse({
        'success': True,
        'rgbValues': [
            {'rgb_text': rgb_text, 'hex': hex_value}
            for rgb_text, hex_value in sorted(lookup.items())
        ],
    })
