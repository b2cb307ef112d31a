"""
Unit conversion and formatting for displaying measurements.
Measurements are computed in millimetres; this converts them for display.
"""

import math


class UnitConverter:
    """
    Handles conversion of millimetre measurements into display units.

    Supports three unit types:
    - mm: Millimeters (native unit of the measurement engine)
    - cm: Centimeters
    - inches: Inches
    """

    # Conversion constants
    MM_PER_INCH = 25.4
    MM_PER_CM = 10.0

    UNITS = ("mm", "cm", "inches")

    def __init__(self, units="mm"):
        """
        Initialize the unit converter.

        Args:
            units: Current unit type ("mm", "cm", or "inches")
        """
        self.set_units(units)

    def set_units(self, units):
        """Change the current unit type"""
        if units not in self.UNITS:
            raise ValueError(f"Units must be one of {', '.join(self.UNITS)}")
        self.units = units

    def mm_to_units(self, value_mm, units=None):
        """
        Convert millimetres to the current (or given) units.

        Args:
            value_mm: Value in millimetres
            units: Override current units (optional)

        Returns:
            Float value in target units
        """
        if units is None:
            units = self.units

        if units == "inches":
            return value_mm / self.MM_PER_INCH
        elif units == "cm":
            return value_mm / self.MM_PER_CM
        return float(value_mm)

    def units_to_mm(self, value, units=None):
        """Convert a value in the current (or given) units to millimetres"""
        if units is None:
            units = self.units

        if units == "inches":
            return value * self.MM_PER_INCH
        elif units == "cm":
            return value * self.MM_PER_CM
        return float(value)

    def area_cm2_to_units(self, area_cm2, units=None):
        """Convert an area in cm² to the square of the current units"""
        factor = self.mm_to_units(self.MM_PER_CM, units)
        return area_cm2 * factor * factor

    def get_unit_label(self, units=None):
        """
        Get display label for unit type.

        Returns:
            String label ("mm", "cm" or "in")
        """
        if units is None:
            units = self.units
        return "in" if units == "inches" else units

    def format_length(self, value_mm, digits=1):
        """Format a millimetre value in the current units, e.g. '25.0 cm'"""
        return f"{fmt(self.mm_to_units(value_mm), digits)} {self.get_unit_label()}"

    def format_area(self, area_cm2, digits=1):
        """Format an area given in cm² in the current units, e.g. '12.5 cm²'"""
        return f"{fmt(self.area_cm2_to_units(area_cm2), digits)} {self.get_unit_label()}²"


def fmt(value, digits=1):
    """Fixed-point format; non-finite values render as '-'"""
    if value is None or not math.isfinite(value):
        return "-"
    return f"{value:.{digits}f}"
