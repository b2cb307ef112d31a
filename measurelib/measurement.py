"""
Measurement extraction - converts rectangle and line pixel extents into
millimetres using a photo's px/mm scale.
"""

import math
from collections import namedtuple

from .geometry import distance


TopFaceMeasurement = namedtuple(
    'TopFaceMeasurement', ['length_mm', 'width_mm', 'area_cm2', 'calibrated'])


def _has_scale(px_per_mm):
    return math.isfinite(px_per_mm) and px_per_mm > 0


def _divisor(px_per_mm):
    # An uncalibrated photo divides by 1, leaving raw pixel counts
    return px_per_mm if _has_scale(px_per_mm) else 1.0


def extract_top_face(rect, px_per_mm):
    """
    Convert the top-face rectangle into physical length, width and area.

    The two extents are sorted so that length is always the larger dimension,
    regardless of how the rectangle was drawn.

    Args:
        rect: Rect (or any (x, y, w, h) sequence) in image pixels
        px_per_mm: Scale of the photo

    Returns:
        TopFaceMeasurement: length_mm, width_mm, area_cm2 and whether the
        numbers were derived from a real scale
    """
    divisor = _divisor(px_per_mm)
    w_mm = rect[2] / divisor
    h_mm = rect[3] / divisor
    length_mm = max(w_mm, h_mm)
    width_mm = min(w_mm, h_mm)
    area_cm2 = (length_mm * width_mm) / 100
    return TopFaceMeasurement(length_mm, width_mm, area_cm2, _has_scale(px_per_mm))


def extract_height(line, px_per_mm):
    """Convert a measurement line (pair of points) into a height in mm"""
    a, b = line
    return distance(a, b) / _divisor(px_per_mm)


def is_measurement_ready(photo_loaded, *values_mm):
    """
    Check whether a step's measurements can be used downstream.

    Args:
        photo_loaded: True once the step's photo has decoded
        *values_mm: Derived measurements of the step

    Returns:
        bool: True iff a photo is loaded and every value is finite and > 0
    """
    if not photo_loaded or not values_mm:
        return False
    return all(math.isfinite(v) and v > 0 for v in values_mm)
