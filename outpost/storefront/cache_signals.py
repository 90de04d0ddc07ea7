"""
Cache invalidation signals: product groups and the RGB lookup table.
"""
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from cache_utils import get_fragment_cache
from productcolors.models import RgbValue

from .models import ProductVariant
from .services.catalog.color_service import RGB_LOOKUP_CACHE_KEY
from .services.catalog.variant_index import invalidate_all_product_groups, invalidate_product_group


@receiver([post_save, post_delete], sender=ProductVariant)
def invalidate_variant_group(sender, instance, **kwargs):
    """
    Drops the cached group (and its swatches) of the style whose rows changed.
    """
    invalidate_product_group(instance.style_code)


@receiver([post_save, post_delete], sender=RgbValue)
def invalidate_rgb_lookup(sender, **kwargs):
    """
    A lookup change can recolour any swatch, so every cached group goes too.
    """
    cache_backend = get_fragment_cache()
    cache_backend.delete(RGB_LOOKUP_CACHE_KEY)
    invalidate_all_product_groups(cache_backend)
