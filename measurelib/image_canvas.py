"""
ImageCanvas - Helper class for managing canvas zoom, pan, display and the drag
magnifier for one photo.
"""

import tkinter as tk

import cv3
import numpy as np
from PIL import Image, ImageTk

from .geometry import clamp


MAGNIFIER_ZOOM = 3.0
MAGNIFIER_RADIUS = 64
MAGNIFIER_MARGIN = 12


class ImageCanvas:
    """Helper class to manage zoom, pan, and display for a canvas"""

    def __init__(self, canvas, canvas_width, canvas_height):
        self.canvas = canvas
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

        # Zoom and pan state
        self.zoom_level = 1.0
        self.pan_offset = [0.0, 0.0]
        self.base_scale_factor = 1.0
        self.needs_initial_center = False

        # Drag state for panning
        self.panning = False
        self.drag_start = None

        # PhotoImage reference (must keep reference to prevent garbage collection)
        self.photo = None

    def update_canvas_size(self, width, height):
        """Update canvas dimensions"""
        self.canvas_width = width
        self.canvas_height = height

    def reset_view(self):
        """Reset zoom and pan to fit the next displayed image"""
        self.zoom_level = 1.0
        self.pan_offset = [0.0, 0.0]
        self.needs_initial_center = True

    def _zoom_about(self, new_zoom, center_x, center_y):
        if center_x is None:
            center_x = self.canvas_width / 2
        if center_y is None:
            center_y = self.canvas_height / 2

        old_zoom = self.zoom_level
        self.zoom_level = new_zoom

        # Keep the image point under the cursor fixed
        zoom_ratio = self.zoom_level / old_zoom
        self.pan_offset[0] = center_x - (center_x - self.pan_offset[0]) * zoom_ratio
        self.pan_offset[1] = center_y - (center_y - self.pan_offset[1]) * zoom_ratio

    def zoom_in(self, center_x=None, center_y=None):
        """Zoom in by 20%, centered on given point"""
        self._zoom_about(min(self.zoom_level * 1.2, 10.0), center_x, center_y)

    def zoom_out(self, center_x=None, center_y=None):
        """Zoom out by 20%, centered on given point"""
        self._zoom_about(max(self.zoom_level / 1.2, 0.1), center_x, center_y)

    def get_zoom_percentage(self):
        """Get current zoom level as percentage"""
        return int(self.zoom_level * self.base_scale_factor * 100)

    @property
    def effective_scale(self):
        return self.base_scale_factor * self.zoom_level

    def clear(self):
        """Clear the canvas"""
        self.canvas.delete("all")
        self.photo = None

    def canvas_to_image_coords(self, canvas_x, canvas_y):
        """Convert canvas coordinates to image coordinates"""
        scale = self.effective_scale
        img_x = (canvas_x - self.pan_offset[0]) / scale
        img_y = (canvas_y - self.pan_offset[1]) / scale
        return img_x, img_y

    def image_to_canvas_coords(self, img_x, img_y):
        """Convert image coordinates to canvas coordinates"""
        scale = self.effective_scale
        canvas_x = img_x * scale + self.pan_offset[0]
        canvas_y = img_y * scale + self.pan_offset[1]
        return canvas_x, canvas_y

    def canvas_to_image_distance(self, canvas_distance):
        """Convert a hit radius in canvas pixels to image pixels"""
        return canvas_distance / self.effective_scale

    def display_image(self, image_rgb, overlay_callback=None, magnifier_point=None):
        """
        Display an image on the canvas with current zoom/pan settings

        Args:
            image_rgb: numpy array in RGB format
            overlay_callback: optional function(canvas_image) drawing overlays
                              in canvas coordinates
            magnifier_point: optional image point to show a zoomed preview of
        """
        if image_rgb is None:
            return

        height, width = image_rgb.shape[:2]

        # Fit the image in the canvas with a small margin
        scale_w = self.canvas_width / width
        scale_h = self.canvas_height / height
        self.base_scale_factor = min(scale_w, scale_h) * 0.98

        scale = self.effective_scale
        new_width = max(1, int(width * scale))
        new_height = max(1, int(height * scale))
        display_image = cv3.resize(image_rgb, new_width, new_height)

        canvas_image = np.full((self.canvas_height, self.canvas_width, 3), 64, dtype=np.uint8)

        if self.needs_initial_center:
            self.pan_offset = [(self.canvas_width - new_width) / 2.0,
                               (self.canvas_height - new_height) / 2.0]
            self.needs_initial_center = False

        x_offset = int(max(0, self.pan_offset[0]))
        y_offset = int(max(0, self.pan_offset[1]))
        img_x_start = int(max(0, -self.pan_offset[0]))
        img_y_start = int(max(0, -self.pan_offset[1]))
        img_x_end = int(min(new_width, img_x_start + self.canvas_width - x_offset))
        img_y_end = int(min(new_height, img_y_start + self.canvas_height - y_offset))

        if img_y_end > img_y_start and img_x_end > img_x_start:
            visible = display_image[img_y_start:img_y_end, img_x_start:img_x_end]
            h, w = visible.shape[:2]
            canvas_image[y_offset:y_offset + h, x_offset:x_offset + w] = visible

        if overlay_callback:
            overlay_callback(canvas_image)

        if magnifier_point is not None:
            self.draw_magnifier(canvas_image, image_rgb, magnifier_point)

        self.photo = ImageTk.PhotoImage(image=Image.fromarray(canvas_image))
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, anchor=tk.NW, image=self.photo)

    def draw_magnifier(self, canvas_image, image_rgb, point,
                       zoom=MAGNIFIER_ZOOM, radius=MAGNIFIER_RADIUS):
        """Paint a circular zoomed preview of image_rgb around point"""
        lens = magnify(image_rgb, point, zoom, radius)
        size = lens.shape[0]

        # Up and to the right of the pointer, kept on the canvas
        px, py = self.image_to_canvas_coords(point[0], point[1])
        edge = radius + MAGNIFIER_MARGIN
        cx = int(clamp(px + edge, edge, max(edge, self.canvas_width - edge)))
        cy = int(clamp(py - edge, edge, max(edge, self.canvas_height - edge)))

        x0, y0 = cx - radius, cy - radius
        x1 = min(x0 + size, canvas_image.shape[1])
        y1 = min(y0 + size, canvas_image.shape[0])
        if x1 <= x0 or y1 <= y0 or x0 < 0 or y0 < 0:
            return

        yy, xx = np.mgrid[0:y1 - y0, 0:x1 - x0]
        inside = (xx - radius) ** 2 + (yy - radius) ** 2 <= radius ** 2
        region = canvas_image[y0:y1, x0:x1]
        region[inside] = lens[:y1 - y0, :x1 - x0][inside]

        cv3.line(canvas_image, cx - radius, cy, cx + radius, cy, color=(255, 255, 255), t=1)
        cv3.line(canvas_image, cx, cy - radius, cx, cy + radius, color=(255, 255, 255), t=1)
        cv3.circle(canvas_image, cx, cy, radius, color=(255, 255, 255), t=2)

    def start_pan(self, x, y):
        """Start panning operation"""
        self.panning = True
        self.drag_start = (x, y)

    def update_pan(self, x, y):
        """Update pan offset during drag"""
        if self.panning and self.drag_start:
            self.pan_offset[0] += x - self.drag_start[0]
            self.pan_offset[1] += y - self.drag_start[1]
            self.drag_start = (x, y)
            return True
        return False

    def end_pan(self):
        """End panning operation"""
        self.panning = False
        self.drag_start = None


def magnify(image_rgb, point, zoom=MAGNIFIER_ZOOM, radius=MAGNIFIER_RADIUS):
    """
    Crop a square around an image point and scale it up.

    Areas outside the image are filled with black.

    Args:
        image_rgb: numpy array in RGB format
        point: (x, y) image coordinates of the lens centre
        zoom: Magnification factor
        radius: Lens radius in output pixels

    Returns:
        numpy array of shape (2 * radius, 2 * radius, 3)
    """
    size = 2 * radius
    half = max(1, int(round(radius / zoom)))
    cx, cy = int(round(point[0])), int(round(point[1]))
    height, width = image_rgb.shape[:2]

    patch = np.zeros((2 * half, 2 * half, 3), dtype=np.uint8)
    sx0, sy0 = max(0, cx - half), max(0, cy - half)
    sx1, sy1 = min(width, cx + half), min(height, cy + half)
    if sx1 > sx0 and sy1 > sy0:
        dx, dy = sx0 - (cx - half), sy0 - (cy - half)
        patch[dy:dy + (sy1 - sy0), dx:dx + (sx1 - sx0)] = image_rgb[sy0:sy1, sx0:sx1, :3]

    return cv3.resize(patch, size, size)
