"""
Engine settings with defaults; override through settings.CUSTOMIZER.
"""
from django.conf import settings

DEFAULTS = {
    'CANVAS_SIZE': 400,
    'MAX_LOGO_BYTES': 10 * 1024 * 1024,
    'MIN_LOGO_PX': 800,
    'RECOMMENDED_LOGO_PX': 1200,
    'IMAGE_FETCH_TIMEOUT': 10,
    'PRODUCT_GROUP_CACHE_TIMEOUT': 600,
    # Remote product photos are only fetched from these hosts.
    'ALLOWED_IMAGE_HOSTS': [],
}


def customizer_setting(name):
    overrides = getattr(settings, 'CUSTOMIZER', None) or {}
    return overrides.get(name, DEFAULTS[name])
