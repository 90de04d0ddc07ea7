"""
Tests for overlay transforms and drag handling (overlay.py).
"""
from django.test import SimpleTestCase

from customizer.overlay import (
    ContainerRect,
    DragController,
    DragState,
    InvalidTransform,
    OverlayTransform,
)

RECT = ContainerRect(left=100, top=50, width=200, height=400)


def client_point(x_pct, y_pct, rect=RECT):
    return rect.left + rect.width * x_pct / 100, rect.top + rect.height * y_pct / 100


class OverlayTransformTests(SimpleTestCase):
    def test_defaults(self):
        transform = OverlayTransform.default("logo.png")
        self.assertEqual(transform.center, (50.0, 50.0))
        self.assertEqual(transform.scale_pct, 20.0)
        self.assertEqual(transform.rotation_deg, 0.0)
        self.assertEqual(transform.opacity, 1.0)
        self.assertEqual(transform.source_image, "logo.png")

    def test_out_of_range_values_are_rejected(self):
        for kwargs in (
            {"position_x": 101},
            {"position_y": -1},
            {"scale_pct": 0},
            {"rotation_deg": 181},
            {"opacity": 1.5},
            {"opacity": float("nan")},
        ):
            with self.subTest(kwargs=kwargs), self.assertRaises(InvalidTransform):
                OverlayTransform(**kwargs)

    def test_scalar_edits_clamp(self):
        transform = OverlayTransform.default()
        self.assertEqual(transform.with_scale(500).scale_pct, 100.0)
        self.assertEqual(transform.with_scale(-4).scale_pct, 1.0)
        self.assertEqual(transform.with_rotation(270).rotation_deg, 180.0)
        self.assertEqual(transform.with_opacity(-0.2).opacity, 0.0)
        self.assertEqual(transform.moved_to(-10, 130).center, (0.0, 100.0))

    def test_edits_return_copies(self):
        transform = OverlayTransform.default()
        moved = transform.moved_to(30, 40)
        self.assertEqual(transform.center, (50.0, 50.0))
        self.assertEqual(moved.center, (30.0, 40.0))

    def test_reset_keeps_rotation_and_opacity(self):
        transform = OverlayTransform("logo.png", 20, 80, 60, 45, 0.4)

        reset = transform.reset()

        self.assertEqual((reset.center, reset.scale_pct), ((50.0, 50.0), 20.0))
        self.assertEqual((reset.rotation_deg, reset.opacity), (45.0, 0.4))
        self.assertEqual(transform.reset_all(), OverlayTransform.default("logo.png"))

    def test_from_wire(self):
        transform = OverlayTransform.from_wire({"src": "a.png", "x": 25, "y": 75, "sizePct": 35, "opacity": 0.95})
        self.assertEqual(transform.center, (25.0, 75.0))
        self.assertEqual(transform.scale_pct, 35.0)
        self.assertEqual(transform.rotation_deg, 0.0)
        self.assertEqual(transform.to_wire()["src"], "a.png")


class DragControllerTests(SimpleTestCase):
    def setUp(self):
        self.drag = DragController(OverlayTransform.default("logo.png"))

    def test_far_outside_pointer_is_clamped(self):
        self.drag.begin(*client_point(50, 50), RECT)

        for pointer in ((-10_000, -10_000), (10_000, 10_000), (-10_000, 10_000)):
            self.drag.move(*pointer)
            position = self.drag.flush_frame()
            self.assertTrue(10 <= position.x <= 90, position)
            self.assertTrue(10 <= position.y <= 90, position)

        self.assertEqual(self.drag.end().center, (10.0, 90.0))

    def test_pointer_offset_from_centre_is_kept(self):
        # grab the overlay 5% right of its centre
        self.drag.begin(*client_point(55, 50), RECT)
        self.drag.move(*client_point(75, 60))

        position = self.drag.flush_frame()

        self.assertAlmostEqual(position.x, 70.0)
        self.assertAlmostEqual(position.y, 60.0)

    def test_moves_are_coalesced_per_frame(self):
        self.drag.begin(*client_point(50, 50), RECT)

        self.assertTrue(self.drag.move(*client_point(20, 20)))
        self.assertFalse(self.drag.move(*client_point(30, 30)))
        self.assertFalse(self.drag.move(*client_point(40, 40)))
        self.assertTrue(self.drag.frame_pending)

        position = self.drag.flush_frame()
        self.assertAlmostEqual(position.x, 40.0)
        self.assertIsNone(self.drag.flush_frame())
        self.assertTrue(self.drag.move(*client_point(45, 45)))

    def test_position_commits_only_on_end(self):
        self.drag.begin(*client_point(50, 50), RECT)
        self.drag.move(*client_point(30, 70))
        self.drag.flush_frame()

        self.assertEqual(self.drag.committed.center, (50.0, 50.0))
        self.assertIs(self.drag.state, DragState.DRAGGING)

        committed = self.drag.end()

        self.assertAlmostEqual(committed.position_x, 30.0)
        self.assertAlmostEqual(committed.position_y, 70.0)
        self.assertIs(self.drag.state, DragState.IDLE)
        self.assertIsNone(self.drag.transient)

    def test_end_applies_pending_move(self):
        self.drag.begin(*client_point(50, 50), RECT)
        self.drag.move(*client_point(35, 35))

        committed = self.drag.end()

        self.assertAlmostEqual(committed.position_x, 35.0)
        self.assertAlmostEqual(committed.position_y, 35.0)

    def test_scale_change_does_not_interrupt_drag(self):
        self.drag.begin(*client_point(50, 50), RECT)
        self.drag.move(*client_point(60, 40))
        self.drag.flush_frame()

        self.drag.replace_committed(self.drag.committed.with_scale(45))

        self.assertTrue(self.drag.is_dragging)
        committed = self.drag.end()
        self.assertEqual(committed.scale_pct, 45.0)
        self.assertAlmostEqual(committed.position_x, 60.0)

    def test_empty_container_does_not_start_drag(self):
        self.assertFalse(self.drag.begin(0, 0, ContainerRect(0, 0, 0, 0)))
        self.assertFalse(self.drag.move(10, 10))
        self.assertEqual(self.drag.end(), self.drag.committed)
