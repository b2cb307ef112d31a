"""
Geometry primitives shared by the calibration, measurement and editor modules.

All coordinates are image-pixel coordinates (origin top-left).
"""

from collections import namedtuple

import numpy as np


Point = namedtuple('Point', ['x', 'y'])


class Rect(namedtuple('Rect', ['x', 'y', 'w', 'h'])):
    """Axis-aligned rectangle in image pixels"""

    __slots__ = ()

    @classmethod
    def from_corners(cls, p1, p2):
        """Build the bounding box of two points, never inverted"""
        left = min(p1[0], p2[0])
        top = min(p1[1], p2[1])
        right = max(p1[0], p2[0])
        bottom = max(p1[1], p2[1])
        return cls(float(left), float(top), float(right - left), float(bottom - top))

    @property
    def right(self):
        return self.x + self.w

    @property
    def bottom(self):
        return self.y + self.h

    def corners(self):
        """Return corners as a dict keyed tl, tr, br, bl"""
        return {
            'tl': Point(self.x, self.y),
            'tr': Point(self.right, self.y),
            'br': Point(self.right, self.bottom),
            'bl': Point(self.x, self.bottom),
        }

    def contains(self, x, y):
        return self.x <= x <= self.right and self.y <= y <= self.bottom


def distance(a, b):
    """Euclidean distance between two points"""
    return float(np.hypot(b[0] - a[0], b[1] - a[1]))


def clamp(value, low, high):
    """Clamp value into [low, high]"""
    return max(low, min(high, value))


def clamp_point(point, width, height):
    """Clamp a point into [0, width] x [0, height]"""
    return Point(clamp(point[0], 0.0, width), clamp(point[1], 0.0, height))


def point_near(point, target, threshold):
    """Check if target lies within threshold of point"""
    return distance(point, target) <= threshold
