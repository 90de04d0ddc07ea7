"""
Tests for the session cart adapter (cart.py).
"""
from django.test import TestCase

from cache_utils import get_fragment_cache
from customizer.cart import lines_from_cart
from storefront.tests.factories import make_variant


class LinesFromCartTests(TestCase):
    def setUp(self):
        get_fragment_cache().clear()
        make_variant("B-M").save()
        make_variant("R-M", colour_code="RED", colour_name="Red").save()
        make_variant("G-M", colour_code="GRN", colour_name="Green", status="Discontinued").save()

    def test_lines_follow_cart_order(self):
        cart = {
            "B-M": {"style_code": "ST001", "title": "Classic Tee", "color": "Black", "size": "M", "quantity": 2},
            "X-1": {"style_code": "OTHER", "title": "Cap", "color": "Navy", "image": "/media/cap.png"},
        }

        lines = lines_from_cart(cart)

        self.assertEqual([line.line_id for line in lines], ["B-M", "X-1"])
        self.assertEqual(lines[0].name, "Classic Tee")
        self.assertEqual(lines[0].selected_color, "Black")

    def test_colour_images_come_from_live_variants(self):
        line = lines_from_cart({"B-M": {"style_code": "ST001", "title": "Classic Tee", "color": "Black"}})[0]

        self.assertEqual(set(line.color_images), {"Black", "Red"})
        self.assertEqual(line.image, "https://cdn.example.com/blk.jpg")
        self.assertEqual(line.image_for("red"), "https://cdn.example.com/red.jpg")
        self.assertEqual(line.image_for("Purple"), line.image)

    def test_unavailable_style_keeps_cart_image(self):
        line = lines_from_cart({"X-1": {"style_code": "GONE", "title": "Cap", "image": "/media/cap.png"}})[0]

        self.assertEqual(line.color_images, {})
        self.assertEqual(line.image, "/media/cap.png")
        self.assertEqual(line.selected_color, "Black")

    def test_empty_cart(self):
        self.assertEqual(lines_from_cart({}), [])
        self.assertEqual(lines_from_cart(None), [])
