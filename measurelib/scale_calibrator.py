"""
ScaleCalibrator - Converts a calibration line over a known-length object into a
pixels-per-millimetre scale for one photo.
"""

import math

from .geometry import Point, distance


# ISO/IEC 7810 ID-1 card width, the default reference object
CREDIT_CARD_WIDTH_MM = 85.60

DEFAULT_CAL_A = Point(80.0, 80.0)
DEFAULT_CAL_B = Point(260.0, 80.0)


def resolve_scale(a, b, reference_length_mm):
    """
    Compute pixels-per-millimetre from a calibration line.

    Args:
        a: First endpoint (image pixels)
        b: Second endpoint (image pixels)
        reference_length_mm: Real-world length of the line in mm

    Returns:
        float: Scale in px/mm, or 0.0 when the line is degenerate or the
               reference length is not a positive number
    """
    if not math.isfinite(reference_length_mm) or reference_length_mm <= 0:
        return 0.0

    pixel_distance = distance(a, b)
    if pixel_distance <= 0 or not math.isfinite(pixel_distance):
        return 0.0

    return pixel_distance / reference_length_mm


class ScaleCalibrator:
    """
    Holds the calibration line for one photo.

    The user drags the two endpoints over an object of known length (ruler,
    card edge) and enters that length. The scale is derived from the current
    endpoints every time it is read, so dragging an endpoint updates all
    downstream measurements immediately.
    """

    def __init__(self, reference_length=CREDIT_CARD_WIDTH_MM):
        """Initialize the scale calibrator with the default line placement"""
        self.points = [DEFAULT_CAL_A, DEFAULT_CAL_B]
        self.length = float(reference_length)

    def get_points(self):
        """Get the two calibration points"""
        return tuple(self.points)

    def set_points(self, a, b):
        """Replace both calibration points"""
        self.points = [Point(float(a[0]), float(a[1])), Point(float(b[0]), float(b[1]))]

    def get_scale_length(self):
        """Get the real-world reference length in mm"""
        return self.length

    def calculate_pixel_distance(self):
        """
        Calculate the pixel distance between the two calibration points.

        Returns:
            float: Euclidean distance in pixels
        """
        pt1, pt2 = self.points
        return distance(pt1, pt2)

    def get_scale_factor(self):
        """Get the current scale factor (pixels per mm), 0.0 if uncalibrated"""
        pt1, pt2 = self.points
        return resolve_scale(pt1, pt2, self.length)

    def is_calibrated(self):
        """Check if the current line and length yield a usable scale"""
        return self.get_scale_factor() > 0

    def set_real_world_length(self, length):
        """
        Set the real-world length of the calibration line.

        Args:
            length: Real-world length in mm

        Returns:
            float: The resulting scale factor (pixels per mm)

        Raises:
            ValueError: If length is not a positive number
        """
        length = float(length)
        if not math.isfinite(length) or length <= 0:
            raise ValueError("Length must be positive")

        self.length = length
        return self.get_scale_factor()

    def get_point_near(self, x, y, threshold=10):
        """
        Find if there's a calibration point near the given coordinates.

        Args:
            x: X coordinate to check
            y: Y coordinate to check
            threshold: Maximum distance in pixels

        Returns:
            int: Index of point (0 or 1), or None if no point nearby
        """
        best = None
        best_distance = threshold
        for i, pt in enumerate(self.points):
            d = distance(pt, (x, y))
            if d <= best_distance:
                best = i
                best_distance = d
        return best

    def update_point(self, index, x, y):
        """
        Update the position of a calibration point.

        Args:
            index: Point index (0 or 1)
            x: New X coordinate
            y: New Y coordinate

        Returns:
            bool: True if update successful, False otherwise
        """
        if 0 <= index < len(self.points):
            self.points[index] = Point(float(x), float(y))
            return True
        return False

    def reset(self):
        """Reset the line to its default placement, keeping the length"""
        self.points = [DEFAULT_CAL_A, DEFAULT_CAL_B]

    def get_status_message(self):
        """
        Get a status message describing current calibration state.

        Returns:
            str: Human-readable status message
        """
        if not self.length > 0:
            return "Enter a positive reference length"
        if not self.is_calibrated():
            return "Calibration line has zero length"
        return (f"Scale: {self.calculate_pixel_distance():.1f} px = {self.length:.1f} mm "
                f"({self.get_scale_factor():.2f} px/mm)")
