"""
Interactive geometry editing - drag state machines for calibration/measurement
line endpoints and the top-face rectangle.

Every point handed to this module is already in image coordinates; the
canvas-to-image transform belongs to ImageCanvas.
"""

import logging

from .geometry import Point, Rect, clamp, clamp_point, distance


IDLE = "idle"
DRAGGING = "dragging"

CORNERS = ('tl', 'tr', 'br', 'bl')
OPPOSITE_CORNER = {'tl': 'br', 'tr': 'bl', 'br': 'tl', 'bl': 'tr'}
BODY = 'body'


class FrameThrottle:
    """
    Coalesces pointer moves so geometry is updated at most once per frame.

    Only the latest pending point survives; intermediate positions are dropped.
    """

    def __init__(self):
        self.pending = None

    def push(self, point):
        """
        Store the latest pointer position.

        Returns:
            bool: True if a flush needs to be scheduled (nothing was pending)
        """
        needs_schedule = self.pending is None
        self.pending = Point(float(point[0]), float(point[1]))
        return needs_schedule

    def flush(self, apply):
        """Hand the pending point (if any) to apply() and clear it"""
        if self.pending is None:
            return False
        point = self.pending
        self.pending = None
        apply(point)
        return True

    def clear(self):
        self.pending = None


class _DragMachine:
    """idle -> dragging -> idle bookkeeping shared by all primitives"""

    def __init__(self):
        self.state = IDLE
        self.target = None
        self.drag_position = None

    def is_dragging(self):
        return self.state == DRAGGING

    def _start(self, target, point):
        self.state = DRAGGING
        self.target = target
        self.drag_position = Point(float(point[0]), float(point[1]))

    def end(self):
        """Finish the drag (pointer-up)"""
        self.state = IDLE
        self.target = None
        self.drag_position = None

    def cancel(self):
        """Abort the drag (pointer-cancel); geometry keeps its last update"""
        self.end()


class LineEditor(_DragMachine):
    """
    Drags the endpoints of a two-point line.

    The line object must expose get_points() and update_point(index, x, y);
    ScaleCalibrator and MeasurementLine both do.
    """

    def __init__(self, line):
        super().__init__()
        self.line = line

    def hit_test(self, point, threshold):
        """Return (index, distance) of the nearest endpoint within threshold"""
        best = None
        for i, pt in enumerate(self.line.get_points()):
            d = distance(pt, point)
            if d <= threshold and (best is None or d < best[1]):
                best = (i, d)
        return best

    def begin(self, index, point):
        if index not in (0, 1):
            raise ValueError(f"Line endpoint index must be 0 or 1, got {index!r}")
        self._start(index, point)

    def update(self, point):
        """Move the grabbed endpoint; the other endpoint stays fixed"""
        if not self.is_dragging():
            return False
        self.line.update_point(self.target, point[0], point[1])
        self.drag_position = Point(float(point[0]), float(point[1]))
        return True


class RectEditor(_DragMachine):
    """
    Resizes (by corner) and moves (by body) an axis-aligned rectangle.

    Bounds are the image size; once known, every edit keeps the rectangle
    inside [0, width] x [0, height].
    """

    def __init__(self, rect, bounds=None):
        super().__init__()
        self.rect = Rect(*rect)
        self.bounds = bounds
        self._fixed_corner = None
        self._drag_origin = None
        self._rect_origin = None

    def set_bounds(self, width, height):
        self.bounds = (float(width), float(height))
        self.set_rect(self.rect)

    def set_rect(self, rect):
        """Replace the rectangle, trimmed to the image once bounds are known"""
        x, y, w, h = (float(v) for v in rect)
        if self.bounds is not None:
            width, height = self.bounds
            x = clamp(x, 0.0, width)
            y = clamp(y, 0.0, height)
            w = clamp(w, 0.0, width - x)
            h = clamp(h, 0.0, height - y)
        self.rect = Rect(x, y, w, h)

    def hit_test(self, point, threshold):
        """
        Find what lies under the pointer.

        Returns:
            (target, distance) where target is a corner name or 'body', or None
        """
        best = None
        for name, corner in self.rect.corners().items():
            d = distance(corner, point)
            if d <= threshold and (best is None or d < best[1]):
                best = (name, d)
        if best is None and self.rect.contains(point[0], point[1]):
            best = (BODY, 0.0)
        return best

    def begin(self, target, point):
        if target == BODY:
            self._drag_origin = Point(float(point[0]), float(point[1]))
            self._rect_origin = self.rect
        elif target in CORNERS:
            self._fixed_corner = self.rect.corners()[OPPOSITE_CORNER[target]]
        else:
            raise ValueError(f"Unknown rectangle drag target: {target!r}")
        self._start(target, point)

    def update(self, point):
        if not self.is_dragging():
            return False
        if self.target == BODY:
            self._move_body(point)
        else:
            self._move_corner(point)
        return True

    def _move_corner(self, point):
        if self.bounds is not None:
            point = clamp_point(point, *self.bounds)
        # min/max against the fixed corner keeps w, h >= 0 even past it
        self.rect = Rect.from_corners(self._fixed_corner, point)
        self.drag_position = Point(float(point[0]), float(point[1]))

    def _move_body(self, point):
        origin = self._rect_origin
        nx = origin.x + (point[0] - self._drag_origin.x)
        ny = origin.y + (point[1] - self._drag_origin.y)
        if self.bounds is not None:
            width, height = self.bounds
            nx = clamp(nx, 0.0, max(0.0, width - origin.w))
            ny = clamp(ny, 0.0, max(0.0, height - origin.h))
        self.rect = Rect(float(nx), float(ny), origin.w, origin.h)
        self.drag_position = Point(self.rect.right, self.rect.bottom)

    def end(self):
        super().end()
        self._fixed_corner = None
        self._drag_origin = None
        self._rect_origin = None


class GeometryEditor:
    """
    Routes one pointer's gestures to the primitive under it.

    Only one primitive drags at a time. Moves go through a FrameThrottle so the
    caller can apply them once per frame with flush().
    """

    def __init__(self, primitives):
        """
        Args:
            primitives: Sequence of LineEditor / RectEditor in hit-test
                        priority order
        """
        self.primitives = list(primitives)
        self.active = None
        self.throttle = FrameThrottle()

    def is_dragging(self):
        return self.active is not None

    @property
    def drag_position(self):
        """Image point for the magnifier, None when idle"""
        if self.active is None:
            return None
        return self.active.drag_position

    def pointer_down(self, point, threshold):
        """
        Start a drag on the first primitive under the pointer.

        Handles (line endpoints, corners) win over the rectangle body.

        Returns:
            bool: True if a drag started
        """
        if self.active is not None:
            self.cancel()

        hits = []
        for order, primitive in enumerate(self.primitives):
            hit = primitive.hit_test(point, threshold)
            if hit is not None:
                target, d = hit
                is_body = target == BODY
                hits.append((is_body, d, order, primitive, target))
        if not hits:
            return False

        hits.sort(key=lambda h: (h[0], h[1], h[2]))
        _, _, _, primitive, target = hits[0]
        primitive.begin(target, point)
        self.active = primitive
        logging.debug("Drag started on %s (%s)", type(primitive).__name__, target)
        return True

    def pointer_move(self, point):
        """
        Queue a move for the active drag.

        Returns:
            bool: True if the caller should schedule a flush()
        """
        if self.active is None:
            return False
        return self.throttle.push(point)

    def flush(self):
        """Apply the latest queued move, if any"""
        if self.active is None:
            self.throttle.clear()
            return False
        return self.throttle.flush(self.active.update)

    def pointer_up(self):
        """End the drag; the final pointer position is applied first"""
        if self.active is None:
            return
        self.flush()
        self.active.end()
        self.active = None

    def cancel(self):
        """Abort the drag without applying queued moves"""
        self.throttle.clear()
        if self.active is not None:
            self.active.cancel()
            self.active = None
