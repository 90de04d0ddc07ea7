"""
Unit tests for the logo preview engine.

Test structure:
- test_overlay.py: transform ranges, reset policy, drag maths
- test_uploads.py: logo upload checks
- test_rendering.py: composite placement and decode failures
- test_session.py: per-line captures, finalisation, colour confirmation
- test_cart.py: session cart adapter
- test_viewsets.py: customizer API endpoints
"""
