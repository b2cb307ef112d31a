"""
Photo sessions - per-photo geometry state for the top-view (length/width) and
side-view (height) measurement steps.
"""

import logging

from .geometry import Point, Rect, distance
from .geometry_editor import GeometryEditor, LineEditor, RectEditor
from .locker import recommend
from .measurement import extract_height, extract_top_face, is_measurement_ready
from .scale_calibrator import CREDIT_CARD_WIDTH_MM, ScaleCalibrator


DEFAULT_TOP_RECT = Rect(120.0, 120.0, 220.0, 160.0)
DEFAULT_HEIGHT_A = Point(180.0, 120.0)
DEFAULT_HEIGHT_B = Point(180.0, 260.0)

# Default placement, relative to the image once its size is known
CAL_LENGTH_RATIO = 0.3
RECT_WIDTH_RATIO = 0.45
RECT_HEIGHT_RATIO = 0.35


class MeasurementLine:
    """Two-point line whose physical length is derived from the photo scale"""

    def __init__(self, a=DEFAULT_HEIGHT_A, b=DEFAULT_HEIGHT_B):
        self.points = [Point(*a), Point(*b)]

    def get_points(self):
        return tuple(self.points)

    def set_points(self, a, b):
        self.points = [Point(float(a[0]), float(a[1])), Point(float(b[0]), float(b[1]))]

    def update_point(self, index, x, y):
        if 0 <= index < len(self.points):
            self.points[index] = Point(float(x), float(y))
            return True
        return False

    def pixel_length(self):
        return distance(*self.points)


class PhotoSession:
    """
    State shared by both photo roles: image size, calibration line, and the
    once-per-photo "placed" flag.
    """

    role = None

    def __init__(self, reference_length=CREDIT_CARD_WIDTH_MM):
        self.calibrator = ScaleCalibrator(reference_length)
        self.image_path = None
        self.image_size = (0, 0)
        self.loaded = False
        self.placed = False
        self.editor = GeometryEditor(self._primitives())

    def _primitives(self):
        return [LineEditor(self.calibrator)]

    def load_photo(self, image_path=None):
        """
        Start a new photo. Geometry is re-placed once its size is known.

        Args:
            image_path: Source of the photo, kept for display only
        """
        self.editor.cancel()
        self.image_path = image_path
        self.image_size = (0, 0)
        self.loaded = False
        self.placed = False

    def set_image_size(self, width, height):
        """
        Record the decoded photo's natural size and place default geometry the
        first time a usable size arrives.
        """
        if width < 0 or height < 0:
            raise ValueError(f"Image size must be non-negative, got {width}x{height}")

        self.image_size = (width, height)
        if width == 0 or height == 0:
            return
        self.loaded = True
        if not self.placed:
            self.place_defaults()
            self.placed = True
            logging.info("Placed %s geometry for %dx%d image", self.role, width, height)

    def place_defaults(self):
        width, height = self.image_size
        cx, cy = width / 2, height / 2
        half = min(width, height) * CAL_LENGTH_RATIO / 2
        self.calibrator.set_points((cx - half, cy), (cx + half, cy))

    def set_reference_length(self, length):
        """Set the calibration reference length (mm); raises ValueError if <= 0"""
        return self.calibrator.set_real_world_length(length)

    def get_scale(self):
        """Current px/mm, recomputed from the calibration line"""
        return self.calibrator.get_scale_factor()

    def is_calibrated(self):
        return self.calibrator.is_calibrated()

    def measurements(self):
        """
        Measured values in mm for this photo's role.

        Subclasses must override this; the base session has no geometry to
        measure beyond its calibration line.

        Returns:
            tuple of float
        """
        raise NotImplementedError(f"{type(self).__name__} does not define measurements()")

    def is_ready(self):
        """True once a photo is loaded, calibrated and measures positive"""
        return self.is_calibrated() and is_measurement_ready(self.loaded, *self.measurements())

    def get_status_message(self):
        if not self.loaded:
            return f"Load a {self.role} photo to begin"
        if not self.is_calibrated():
            return f"Uncalibrated: {self.calibrator.get_status_message()}"
        return self.calibrator.get_status_message()


class TopPhotoSession(PhotoSession):
    """Top-down photo: calibration line plus the top-face rectangle"""

    role = "top"

    def _primitives(self):
        self.rect_editor = RectEditor(DEFAULT_TOP_RECT)
        return [LineEditor(self.calibrator), self.rect_editor]

    @property
    def rect(self):
        return self.rect_editor.rect

    def set_rect(self, rect):
        self.rect_editor.set_rect(rect)

    def set_image_size(self, width, height):
        if width > 0 and height > 0:
            self.rect_editor.set_bounds(width, height)
        super().set_image_size(width, height)

    def place_defaults(self):
        super().place_defaults()
        width, height = self.image_size
        rw, rh = width * RECT_WIDTH_RATIO, height * RECT_HEIGHT_RATIO
        self.rect_editor.set_rect((width / 2 - rw / 2, height / 2 - rh / 2, rw, rh))

    def top_face(self):
        return extract_top_face(self.rect, self.get_scale())

    def measurements(self):
        face = self.top_face()
        return (face.length_mm, face.width_mm)


class SidePhotoSession(PhotoSession):
    """Side photo: calibration line plus the height measurement line"""

    role = "side"

    def _primitives(self):
        self.height_line = MeasurementLine()
        return [LineEditor(self.calibrator), LineEditor(self.height_line)]

    def place_defaults(self):
        super().place_defaults()
        width, height = self.image_size
        cx, cy = width / 2, height / 2
        half = min(width, height) * CAL_LENGTH_RATIO / 2
        self.height_line.set_points((cx, cy - half), (cx, cy + half))

    def height_mm(self):
        return extract_height(self.height_line.get_points(), self.get_scale())

    def measurements(self):
        return (self.height_mm(),)


class MeasurementFlow:
    """
    Two-step flow: top view first, then side view, then a locker
    recommendation once both steps are ready.
    """

    TOP = "top"
    SIDE = "side"

    def __init__(self, reference_length=CREDIT_CARD_WIDTH_MM):
        self.top = TopPhotoSession(reference_length)
        self.side = SidePhotoSession(reference_length)
        self.step = self.TOP

    def current_session(self):
        return self.top if self.step == self.TOP else self.side

    def can_advance(self):
        return self.top.is_ready()

    def go_to(self, step):
        """
        Switch step. The side step is only reachable once the top is ready.

        Returns:
            bool: True if the step changed
        """
        if step not in (self.TOP, self.SIDE):
            raise ValueError(f"Unknown step: {step!r}")
        if step == self.SIDE and not self.can_advance():
            return False
        self.step = step
        return True

    def is_complete(self):
        return self.top.is_ready() and self.side.is_ready()

    def dimensions(self):
        """(length_mm, width_mm, height_mm) from the current geometry"""
        face = self.top.top_face()
        return (face.length_mm, face.width_mm, self.side.height_mm())

    def recommendation(self):
        """LockerRecommendation, or None while either step is not ready"""
        if not self.is_complete():
            return None
        return recommend(*self.dimensions())
