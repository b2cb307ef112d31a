"""Tests for the drag state machines, throttle and gesture routing."""

import random
import unittest

from measurelib.geometry import Point, Rect
from measurelib.geometry_editor import (
    BODY, DRAGGING, IDLE, FrameThrottle, GeometryEditor, LineEditor, RectEditor,
)
from measurelib.photo_session import MeasurementLine
from measurelib.scale_calibrator import ScaleCalibrator


class TestFrameThrottle(unittest.TestCase):
    def test_last_point_wins(self):
        throttle = FrameThrottle()
        self.assertTrue(throttle.push((1, 1)))
        self.assertFalse(throttle.push((2, 2)))
        self.assertFalse(throttle.push((3, 3)))

        applied = []
        self.assertTrue(throttle.flush(applied.append))
        self.assertEqual(applied, [Point(3.0, 3.0)])
        self.assertFalse(throttle.flush(applied.append))

    def test_clear_drops_pending(self):
        throttle = FrameThrottle()
        throttle.push((1, 1))
        throttle.clear()
        applied = []
        self.assertFalse(throttle.flush(applied.append))
        self.assertEqual(applied, [])


class TestLineEditor(unittest.TestCase):
    def setUp(self):
        self.line = MeasurementLine((0, 0), (100, 0))
        self.editor = LineEditor(self.line)

    def test_moves_only_grabbed_endpoint(self):
        self.editor.begin(1, (100, 0))
        self.assertEqual(self.editor.state, DRAGGING)
        self.editor.update((150, 40))
        self.assertEqual(self.line.get_points(), (Point(0, 0), Point(150.0, 40.0)))

    def test_updates_ignored_when_idle(self):
        self.assertFalse(self.editor.update((50, 50)))
        self.assertEqual(self.line.get_points(), (Point(0, 0), Point(100, 0)))

    def test_end_returns_to_idle_and_clears_drag_position(self):
        self.editor.begin(0, (0, 0))
        self.editor.update((5, 5))
        self.assertEqual(self.editor.drag_position, Point(5.0, 5.0))
        self.editor.end()
        self.assertEqual(self.editor.state, IDLE)
        self.assertIsNone(self.editor.drag_position)
        self.assertFalse(self.editor.update((9, 9)))

    def test_hit_test(self):
        self.assertEqual(self.editor.hit_test((97, 0), 5)[0], 1)
        self.assertIsNone(self.editor.hit_test((50, 0), 5))

    def test_begin_rejects_bad_index(self):
        with self.assertRaises(ValueError):
            self.editor.begin(2, (0, 0))

    def test_drives_scale_calibrator(self):
        cal = ScaleCalibrator(reference_length=50)
        cal.set_points((0, 0), (100, 0))
        editor = LineEditor(cal)
        editor.begin(1, (100, 0))
        editor.update((200, 0))
        self.assertEqual(cal.get_scale_factor(), 4.0)


class TestRectEditor(unittest.TestCase):
    def setUp(self):
        self.editor = RectEditor(Rect(100, 100, 200, 100), bounds=(1000, 800))

    def test_corner_drag_keeps_opposite_corner(self):
        self.editor.begin('br', (300, 200))
        self.editor.update((400, 350))
        self.assertEqual(self.editor.rect, Rect(100.0, 100.0, 300.0, 250.0))

    def test_corner_drag_past_opposite_corner_swaps(self):
        self.editor.begin('tl', (100, 100))
        self.editor.update((500, 600))
        self.assertEqual(self.editor.rect, Rect(300.0, 200.0, 200.0, 400.0))

    def test_corner_drag_clamped_to_bounds(self):
        self.editor.begin('tr', (300, 100))
        self.editor.update((2000, -50))
        self.assertEqual(self.editor.rect, Rect(100.0, 0.0, 900.0, 200.0))

    def test_corner_drags_never_negative(self):
        rng = random.Random(7)
        for _ in range(200):
            corner = rng.choice(['tl', 'tr', 'br', 'bl'])
            self.editor.begin(corner, self.editor.rect.corners()[corner])
            for _ in range(3):
                self.editor.update((rng.uniform(-500, 1500), rng.uniform(-500, 1300)))
            self.editor.end()
            rect = self.editor.rect
            self.assertGreaterEqual(rect.w, 0)
            self.assertGreaterEqual(rect.h, 0)
            self.assertGreaterEqual(rect.x, 0)
            self.assertGreaterEqual(rect.y, 0)
            self.assertLessEqual(rect.right, 1000)
            self.assertLessEqual(rect.bottom, 800)

    def test_body_drag_translates(self):
        self.editor.begin(BODY, (150, 150))
        self.editor.update((170, 130))
        self.assertEqual(self.editor.rect, Rect(120.0, 80.0, 200.0, 100.0))
        self.assertEqual(self.editor.drag_position, Point(320.0, 180.0))

    def test_body_drag_clamped_on_canvas(self):
        rng = random.Random(11)
        self.editor.begin(BODY, (150, 150))
        for _ in range(200):
            self.editor.update((rng.uniform(-5000, 5000), rng.uniform(-5000, 5000)))
            rect = self.editor.rect
            self.assertTrue(0 <= rect.x <= 1000 - 200)
            self.assertTrue(0 <= rect.y <= 800 - 100)
            self.assertEqual((rect.w, rect.h), (200, 100))

    def test_body_drag_larger_than_image_pins_to_origin(self):
        editor = RectEditor(Rect(0, 0, 500, 500), bounds=(300, 300))
        editor.begin(BODY, (10, 10))
        editor.update((200, 200))
        self.assertEqual((editor.rect.x, editor.rect.y), (0.0, 0.0))

    def test_hit_test_prefers_corner(self):
        self.assertEqual(self.editor.hit_test((102, 98), 10)[0], 'tl')
        self.assertEqual(self.editor.hit_test((200, 150), 10)[0], BODY)
        self.assertIsNone(self.editor.hit_test((600, 600), 10))

    def test_set_rect_trimmed_to_bounds(self):
        self.editor.set_rect((900, 700, 500, 500))
        self.assertEqual(self.editor.rect, Rect(900.0, 700.0, 100.0, 100.0))
        self.editor.set_rect((-50, 2000, 80, 80))
        self.assertEqual(self.editor.rect, Rect(0.0, 800.0, 80.0, 0.0))

    def test_set_rect_without_bounds_is_stored(self):
        editor = RectEditor(Rect(0, 0, 10, 10))
        editor.set_rect((900, 700, 500, 500))
        self.assertEqual(editor.rect, Rect(900.0, 700.0, 500.0, 500.0))

    def test_set_bounds_trims_existing_rect(self):
        editor = RectEditor(Rect(100, 100, 400, 400))
        editor.set_bounds(300, 200)
        self.assertEqual(editor.rect, Rect(100.0, 100.0, 200.0, 100.0))

    def test_unknown_target(self):
        with self.assertRaises(ValueError):
            self.editor.begin('middle', (0, 0))


class TestGeometryEditor(unittest.TestCase):
    def setUp(self):
        self.cal = ScaleCalibrator()
        self.cal.set_points((0, 0), (100, 0))
        self.rect_editor = RectEditor(Rect(50, 50, 200, 200), bounds=(500, 500))
        self.editor = GeometryEditor([LineEditor(self.cal), self.rect_editor])

    def test_miss_starts_nothing(self):
        self.assertFalse(self.editor.pointer_down((450, 450), 10))
        self.assertFalse(self.editor.is_dragging())
        self.assertFalse(self.editor.pointer_move((1, 1)))

    def test_handle_beats_body(self):
        # Endpoint sitting inside the rectangle body
        self.cal.set_points((0, 0), (150, 150))
        self.assertTrue(self.editor.pointer_down((152, 150), 10))
        self.assertIsInstance(self.editor.active, LineEditor)
        self.assertEqual(self.editor.active.target, 1)

    def test_converges_to_last_pointer_position(self):
        self.editor.pointer_down((100, 0), 10)
        self.assertTrue(self.editor.pointer_move((110, 0)))
        self.assertFalse(self.editor.pointer_move((120, 5)))
        self.editor.flush()
        self.editor.pointer_move((130, 10))
        self.editor.pointer_up()
        self.assertEqual(self.cal.get_points()[1], Point(130.0, 10.0))
        self.assertFalse(self.editor.is_dragging())

    def test_drag_position_published_only_while_dragging(self):
        self.assertIsNone(self.editor.drag_position)
        self.editor.pointer_down((150, 150), 10)
        self.editor.pointer_move((160, 160))
        self.editor.flush()
        self.assertIsNotNone(self.editor.drag_position)
        self.editor.pointer_up()
        self.assertIsNone(self.editor.drag_position)

    def test_cancel_drops_pending_move(self):
        self.editor.pointer_down((100, 0), 10)
        self.editor.pointer_move((300, 300))
        self.editor.cancel()
        self.assertEqual(self.cal.get_points()[1], Point(100.0, 0.0))
        self.assertFalse(self.editor.is_dragging())


if __name__ == "__main__":
    unittest.main()
