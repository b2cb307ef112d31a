"""Tests for geometry primitives."""

import unittest

from measurelib.geometry import Point, Rect, clamp, clamp_point, distance, point_near


class TestGeometry(unittest.TestCase):
    def test_distance(self):
        self.assertEqual(distance(Point(0, 0), Point(3, 4)), 5.0)
        self.assertEqual(distance((1, 1), (1, 1)), 0.0)

    def test_clamp(self):
        self.assertEqual(clamp(5, 0, 10), 5)
        self.assertEqual(clamp(-1, 0, 10), 0)
        self.assertEqual(clamp(11, 0, 10), 10)

    def test_clamp_point(self):
        self.assertEqual(clamp_point((-5, 120), 100, 100), Point(0.0, 100))

    def test_point_near(self):
        self.assertTrue(point_near((0, 0), (6, 8), 10))
        self.assertFalse(point_near((0, 0), (6, 8), 9.9))

    def test_rect_from_corners_never_inverted(self):
        rect = Rect.from_corners((50, 80), (10, 20))
        self.assertEqual(rect, Rect(10.0, 20.0, 40.0, 60.0))

    def test_rect_corners(self):
        corners = Rect(10, 20, 30, 40).corners()
        self.assertEqual(corners['tl'], Point(10, 20))
        self.assertEqual(corners['tr'], Point(40, 20))
        self.assertEqual(corners['br'], Point(40, 60))
        self.assertEqual(corners['bl'], Point(10, 60))

    def test_rect_contains(self):
        rect = Rect(0, 0, 10, 10)
        self.assertTrue(rect.contains(5, 5))
        self.assertTrue(rect.contains(10, 10))
        self.assertFalse(rect.contains(11, 5))


if __name__ == "__main__":
    unittest.main()
