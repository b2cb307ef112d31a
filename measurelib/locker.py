"""
Locker recommendation - classifies a parcel's (length, width, height) into the
smallest locker tier it fits.
"""

import math
from collections import namedtuple
from decimal import ROUND_HALF_UP, Decimal


LockerSpec = namedtuple('LockerSpec', ['label', 'length', 'width', 'height'])

# All tiers share the same footprint; they differ only in height.
LOCKER_SIZES = (
    LockerSpec("SMALL", 385, 500, 110.2),
    LockerSpec("MEDIUM", 385, 500, 222.2),
    LockerSpec("LARGE", 385, 500, 301),
)

TOO_LARGE = "TOO_LARGE"
TOO_TALL = "TOO_TALL"

# Short label and badge colour for the GUI
DISPLAY_STYLES = {
    "SMALL": ("SMALL", "#36d399"),
    "MEDIUM": ("MEDIUM", "#36d399"),
    "LARGE": ("LARGE", "#36d399"),
    TOO_LARGE: ("Too large for footprint", "#ff6b6b"),
    TOO_TALL: ("Height exceeds LARGE", "#ffb020"),
}


def _fmt_limit(value):
    # 301 -> "301", 110.2 -> "110.2"
    return f"{value:g}"


def _fmt_height(value):
    """One decimal, exact ties rounded away from zero (1.25 -> "1.3")"""
    if not math.isfinite(value):
        return f"{value:.1f}"
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class LockerRecommendation(namedtuple('LockerRecommendation',
                                      ['size', 'fits', 'dimensions', 'locker_spec', 'reason'])):
    """Result of recommend(); dimensions is a (length, width, height) tuple in mm"""

    __slots__ = ()

    @property
    def display_label(self):
        return DISPLAY_STYLES[self.size][0]

    @property
    def display_color(self):
        return DISPLAY_STYLES[self.size][1]

    def to_dict(self):
        """Serialize to the JSON shape returned by the HTTP endpoint"""
        length, width, height = self.dimensions
        return {
            "size": self.size,
            "fits": self.fits,
            "dimensions": {"length_mm": length, "width_mm": width, "height_mm": height},
            "lockerSpecs": {
                "length_mm": self.locker_spec.length,
                "width_mm": self.locker_spec.width,
                "height_mm": self.locker_spec.height,
            },
            "reason": self.reason,
        }


def recommend(length_mm, width_mm, height_mm):
    """
    Recommend the smallest locker tier for a parcel.

    The parcel may be rotated on its footprint, so the shorter side is checked
    against the locker length and the longer side against the locker width.
    All comparisons are inclusive.

    Args:
        length_mm: Parcel length in mm
        width_mm: Parcel width in mm
        height_mm: Parcel height in mm

    Returns:
        LockerRecommendation
    """
    dimensions = (length_mm, width_mm, height_mm)
    smallest = LOCKER_SIZES[0]
    largest = LOCKER_SIZES[-1]

    a = min(length_mm, width_mm)
    b = max(length_mm, width_mm)
    # min/max drop a NaN depending on argument order, so check the inputs
    footprint_ok = (math.isfinite(length_mm) and math.isfinite(width_mm)
                    and a <= smallest.length and b <= smallest.width)
    if not footprint_ok:
        return LockerRecommendation(
            TOO_LARGE, False, dimensions, smallest,
            f"Parcel footprint exceeds maximum locker dimensions "
            f"({smallest.length}×{smallest.width}mm)")

    for spec in LOCKER_SIZES:
        if height_mm <= spec.height:
            return LockerRecommendation(
                spec.label, True, dimensions, spec,
                f"Fits in {spec.label} locker "
                f"(height: {_fmt_height(height_mm)}mm ≤ {_fmt_limit(spec.height)}mm)")

    return LockerRecommendation(
        TOO_TALL, False, dimensions, largest,
        f"Height exceeds {largest.label} locker capacity "
        f"({_fmt_height(height_mm)}mm > {_fmt_limit(largest.height)}mm)")
