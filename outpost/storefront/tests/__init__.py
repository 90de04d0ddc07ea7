"""
Unit tests for the storefront app.

Test structure:
- test_color_service.py: swatch HEX resolution and the RGB lookup table
- test_variant_index.py: product groups, price ranges, variant fallback, caching
- test_api.py: JSON endpoints for product pages
"""
