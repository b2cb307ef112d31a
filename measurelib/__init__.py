"""
Parcel measurement library - calibration, measurement and locker recommendation.

The tkinter-bound ImageCanvas and the FastAPI app live in their own modules
(measurelib.image_canvas, measurelib.api) and are not imported here.
"""

from .geometry import Point, Rect, distance, clamp
from .scale_calibrator import ScaleCalibrator, resolve_scale
from .measurement import TopFaceMeasurement, extract_top_face, extract_height, is_measurement_ready
from .geometry_editor import FrameThrottle, GeometryEditor, LineEditor, RectEditor
from .photo_session import MeasurementFlow, MeasurementLine, SidePhotoSession, TopPhotoSession
from .locker import LOCKER_SIZES, LockerRecommendation, LockerSpec, recommend
from .unit_converter import UnitConverter

__all__ = [
    'Point',
    'Rect',
    'distance',
    'clamp',
    'ScaleCalibrator',
    'resolve_scale',
    'TopFaceMeasurement',
    'extract_top_face',
    'extract_height',
    'is_measurement_ready',
    'FrameThrottle',
    'GeometryEditor',
    'LineEditor',
    'RectEditor',
    'MeasurementFlow',
    'MeasurementLine',
    'SidePhotoSession',
    'TopPhotoSession',
    'LOCKER_SIZES',
    'LockerRecommendation',
    'LockerSpec',
    'recommend',
    'UnitConverter',
]
