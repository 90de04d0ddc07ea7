"""
Tests for composite rendering (rendering.py).
"""
from unittest import mock

import requests
from asgiref.sync import async_to_sync
from django.test import SimpleTestCase, override_settings

from customizer.overlay import OverlayTransform
from customizer.rendering import CompositeRenderer, ImageLoadError, decode_image, read_image_bytes
from customizer.tests.images import corrupt_png_bytes, png_data_url
from customizer.uploads import to_data_url

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


class CompositeRendererTests(SimpleTestCase):
    def setUp(self):
        self.renderer = CompositeRenderer(canvas_size=100)
        self.base = png_data_url((40, 40), RED)
        self.logo = png_data_url((10, 10), BLUE)

    def render(self, **transform):
        result = async_to_sync(self.renderer.render)(
            self.base, OverlayTransform(source_image=self.logo, **transform)
        )
        self.assertTrue(result.ok, result.error)
        return decode_image(result.image)

    def assertRedAt(self, image, point):
        red, green, blue, _ = image.getpixel(point)
        self.assertGreater(red, 240, point)
        self.assertLess(blue, 15, point)

    def assertBlueAt(self, image, point):
        red, green, blue, _ = image.getpixel(point)
        self.assertGreater(blue, 240, point)
        self.assertLess(red, 15, point)

    def test_output_is_canvas_sized_png(self):
        image = self.render()
        self.assertEqual(image.size, (100, 100))

    def test_overlay_is_centred_on_position(self):
        # 20% of a 100px canvas: a 20px square spanning 40..59
        image = self.render(position_x=50, position_y=50, scale_pct=20)

        self.assertBlueAt(image, (50, 50))
        self.assertBlueAt(image, (41, 58))
        self.assertRedAt(image, (36, 50))
        self.assertRedAt(image, (50, 63))
        self.assertRedAt(image, (5, 5))

    def test_overlay_follows_position(self):
        image = self.render(position_x=25, position_y=75, scale_pct=10)

        self.assertBlueAt(image, (25, 75))
        self.assertRedAt(image, (50, 50))

    def test_transparent_overlay_leaves_base(self):
        image = self.render(opacity=0)
        self.assertRedAt(image, (50, 50))

    def test_rotated_overlay_keeps_centre(self):
        image = self.render(scale_pct=30, rotation_deg=45)

        self.assertBlueAt(image, (50, 50))
        # the corner of an unrotated 30px square is outside the rotated diamond
        self.assertRedAt(image, (36, 36))

    def test_decode_failure_gives_empty_result(self):
        result = async_to_sync(self.renderer.render)(
            "data:image/png;base64,bm90IGFuIGltYWdl",
            OverlayTransform(source_image=self.logo),
        )
        self.assertFalse(result.ok)
        self.assertIsNone(result.image)
        self.assertIn("decode", result.error)

    def test_corrupt_pixel_data_gives_empty_result(self):
        corrupt = to_data_url(corrupt_png_bytes(), "image/png")
        with self.assertRaises(ImageLoadError):
            decode_image(corrupt)

        result = async_to_sync(self.renderer.render)(corrupt, OverlayTransform(source_image=self.logo))
        self.assertFalse(result.ok)
        self.assertIsNotNone(result.error)

    def test_drawing_failure_gives_empty_result(self):
        with mock.patch("customizer.rendering.flatten", side_effect=RuntimeError("canvas too large")):
            result = async_to_sync(self.renderer.render)(self.base, OverlayTransform(source_image=self.logo))
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "Render unavailable")

    def test_missing_overlay_gives_empty_result(self):
        result = async_to_sync(self.renderer.render)(self.base, OverlayTransform())
        self.assertFalse(result.ok)

    def test_svg_overlay_cannot_be_rasterised(self):
        svg = "data:image/svg+xml;base64,PHN2ZyB4bWxucz0iaHR0cDovL3d3dy53My5vcmcvMjAwMC9zdmciLz4="
        result = async_to_sync(self.renderer.render)(self.base, OverlayTransform(source_image=svg))
        self.assertFalse(result.ok)


@override_settings(CUSTOMIZER={'ALLOWED_IMAGE_HOSTS': ['.example.com']})
class ReadImageBytesTests(SimpleTestCase):
    def test_http_failure_raises_load_error(self):
        with mock.patch("customizer.rendering.requests.get", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(ImageLoadError):
                read_image_bytes("https://cdn.example.com/tee.jpg")

    def test_http_fetch_uses_timeout(self):
        response = mock.Mock(content=b"bytes")
        with mock.patch("customizer.rendering.requests.get", return_value=response) as get:
            self.assertEqual(read_image_bytes("https://cdn.example.com/tee.jpg", timeout=3), b"bytes")
        get.assert_called_once_with("https://cdn.example.com/tee.jpg", timeout=3)
        response.raise_for_status.assert_called_once_with()

    def test_missing_media_file_raises_load_error(self):
        with self.assertRaises(ImageLoadError):
            read_image_bytes("/media/does/not/exist.png")

    def test_empty_reference(self):
        with self.assertRaises(ImageLoadError):
            read_image_bytes("")

    def test_unlisted_host_is_never_fetched(self):
        with mock.patch("customizer.rendering.requests.get") as get:
            for ref in ("http://169.254.169.254/latest/meta-data/", "https://example.org/tee.jpg", "http:///tee.jpg"):
                with self.subTest(ref=ref):
                    with self.assertRaises(ImageLoadError):
                        read_image_bytes(ref)
        get.assert_not_called()

    @override_settings(CUSTOMIZER={})
    def test_no_hosts_allowed_by_default(self):
        with mock.patch("customizer.rendering.requests.get") as get:
            with self.assertRaises(ImageLoadError):
                read_image_bytes("https://cdn.example.com/tee.jpg")
        get.assert_not_called()

    def test_unlisted_base_image_gives_empty_composite(self):
        transform = OverlayTransform(source_image=png_data_url((10, 10), BLUE))
        with mock.patch("customizer.rendering.requests.get") as get:
            result = async_to_sync(CompositeRenderer(canvas_size=20).render)("http://10.0.0.1/admin", transform)
        self.assertFalse(result.ok)
        get.assert_not_called()
