"""
Parcel Measure - Interactive parcel measurement from two photos
Top view: drag a calibration line over a known-length object, fit a rectangle
around the parcel top face. Side view: calibrate again, drag a line over the
parcel height. The measured dimensions are matched to a locker size.
Features: Zoom, Pan, Drag handles with magnifier, HEIC photos
"""

import argparse
import logging
import tkinter as tk
from tkinter import filedialog, ttk  # Convenience imports for dialogs and themed widgets

import cv3  # For basic I/O and drawing operations
import numpy as np
from PIL import Image
from pillow_heif import register_heif_opener  # For HEIC file support

from measurelib.geometry_editor import BODY
from measurelib.image_canvas import ImageCanvas
from measurelib.photo_session import MeasurementFlow
from measurelib.scale_calibrator import CREDIT_CARD_WIDTH_MM
from measurelib.unit_converter import UnitConverter, fmt

# Register HEIF opener with Pillow to enable HEIC support
register_heif_opener()


HANDLE_THRESHOLD = 20  # canvas pixels
FRAME_MS = 16

CAL_COLOR = (60, 140, 255)
MEASURE_COLOR = (255, 176, 32)
RECT_COLOR = (255, 255, 255)
HANDLE_COLOR = (255, 80, 80)

STEP_TEXT = {
    MeasurementFlow.TOP: "Top view: drag the blue line over a known length, then fit the "
                         "rectangle around the parcel top face.",
    MeasurementFlow.SIDE: "Side view: drag the blue line over a known length, then drag the "
                          "amber line to match the parcel height.",
}


def read_image(file_path):
    """
    Decode a photo into an RGB numpy array.

    Returns:
        numpy array, or None if the file could not be decoded
    """
    if file_path.lower().endswith(('.heic', '.heif')):
        # Load HEIC with PIL/pillow-heif, then convert to numpy array
        try:
            return np.array(Image.open(file_path).convert('RGB'))
        except OSError as e:
            logging.error(f"Could not load HEIC image {file_path}: {e}")
            return None

    # cv3 loads images in RGB by default
    try:
        return cv3.imread(file_path)
    except (OSError, ValueError) as e:
        logging.error(f"Could not load image {file_path}: {e}")
        return None


class ParcelMeasureGUI:
    def __init__(self, root, reference_length=CREDIT_CARD_WIDTH_MM, units="mm"):
        self.root = root
        self.root.title("Parcel Measure")

        self.flow = MeasurementFlow(reference_length)
        self.converter = UnitConverter(units)
        self.images = {MeasurementFlow.TOP: None, MeasurementFlow.SIDE: None}

        # Canvas dimensions (will be set in setup_ui)
        self.canvas_width = 640
        self.canvas_height = 480
        self.image_canvases = {}

        # Pending frame flush for throttled drags
        self.flush_job = None

        self.units = tk.StringVar(value=units)
        self.units.trace_add('write', self.on_units_changed)
        self.ref_length_var = tk.StringVar(value=f"{reference_length:.2f}")
        self.ref_length_var.trace_add('write', self.on_ref_length_changed)

        self.setup_ui()
        self.show_step(MeasurementFlow.TOP)

    def setup_ui(self):
        screen_width = self.root.winfo_screenwidth()
        screen_height = self.root.winfo_screenheight()
        self.canvas_width = max(400, int(screen_width * 0.6))
        self.canvas_height = max(300, int(screen_height * 0.65))

        # Menu Bar
        menubar = tk.Menu(self.root)
        self.root.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Load Photo...", command=self.load_image, accelerator="Ctrl+O")
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.root.quit, accelerator="Alt+F4")

        self.root.bind('<Control-o>', lambda e: self.load_image())
        self.root.bind('<Escape>', lambda e: self.cancel_drag())

        # Stepper
        stepper = ttk.Frame(self.root, padding="5")
        stepper.grid(row=0, column=0, sticky=(tk.W, tk.E))
        self.top_step_btn = ttk.Button(stepper, text="1. Top View",
                                       command=lambda: self.show_step(MeasurementFlow.TOP))
        self.top_step_btn.pack(side=tk.LEFT, padx=2)
        self.side_step_btn = ttk.Button(stepper, text="2. Side View",
                                        command=lambda: self.show_step(MeasurementFlow.SIDE))
        self.side_step_btn.pack(side=tk.LEFT, padx=2)
        self.step_label = ttk.Label(stepper, text="", wraplength=self.canvas_width - 300)
        self.step_label.pack(side=tk.LEFT, padx=10)

        # Controls
        controls = ttk.Frame(self.root, padding="5")
        controls.grid(row=1, column=0, sticky=(tk.W, tk.E))
        ttk.Button(controls, text="Load photo...", command=self.load_image).pack(side=tk.LEFT, padx=2)
        ttk.Label(controls, text="Ref length (mm):").pack(side=tk.LEFT, padx=(10, 3))
        ttk.Entry(controls, textvariable=self.ref_length_var, width=8).pack(side=tk.LEFT)
        ttk.Label(controls, text="Units:").pack(side=tk.LEFT, padx=(10, 3))
        ttk.Combobox(controls, textvariable=self.units, values=UnitConverter.UNITS,
                     state="readonly", width=7).pack(side=tk.LEFT)

        # Canvas
        canvas_frame = ttk.Frame(self.root)
        canvas_frame.grid(row=2, column=0, padx=5, pady=5, sticky=(tk.W, tk.E, tk.N, tk.S))
        self.canvas = tk.Canvas(canvas_frame, bg='gray', cursor="cross",
                                width=self.canvas_width, height=self.canvas_height,
                                highlightthickness=0)
        self.canvas.pack(fill=tk.BOTH, expand=True)

        for step in (MeasurementFlow.TOP, MeasurementFlow.SIDE):
            self.image_canvases[step] = ImageCanvas(self.canvas, self.canvas_width, self.canvas_height)

        zoom_overlay = ttk.Frame(canvas_frame, relief=tk.RAISED, borderwidth=1)
        zoom_overlay.place(relx=1.0, rely=0.0, x=-5, y=5, anchor=tk.NE)
        ttk.Button(zoom_overlay, text="+", command=self.zoom_in, width=3).pack(side=tk.LEFT, padx=1)
        ttk.Button(zoom_overlay, text="-", command=self.zoom_out, width=3).pack(side=tk.LEFT, padx=1)
        ttk.Button(zoom_overlay, text="Fit", command=self.zoom_fit, width=4).pack(side=tk.LEFT, padx=1)
        self.zoom_label = ttk.Label(zoom_overlay, text="100%", width=5)
        self.zoom_label.pack(side=tk.LEFT, padx=3)

        # Tk keeps delivering B1-Motion/ButtonRelease to the canvas while the
        # button is held, even outside it, so drags always end here.
        self.canvas.bind("<Button-1>", self.on_canvas_click)
        self.canvas.bind("<B1-Motion>", self.on_canvas_drag)
        self.canvas.bind("<ButtonRelease-1>", self.on_canvas_release)
        self.canvas.bind("<MouseWheel>", self.on_mouse_wheel)
        self.canvas.bind("<Configure>", self.on_canvas_resize)

        # Stats
        stats = ttk.Frame(self.root, padding="5")
        stats.grid(row=3, column=0, sticky=(tk.W, tk.E))
        self.scale_label = ttk.Label(stats, text="", width=24)
        self.scale_label.pack(side=tk.LEFT, padx=5)
        self.stats_label = ttk.Label(stats, text="")
        self.stats_label.pack(side=tk.LEFT, padx=5)
        self.result_label = tk.Label(stats, text="", fg="black", padx=8)
        self.result_label.pack(side=tk.RIGHT, padx=5)

        # Status Bar at bottom
        status_frame = ttk.Frame(self.root, relief=tk.SUNKEN, padding="2")
        status_frame.grid(row=4, column=0, sticky=(tk.W, tk.E))
        self.status_label = ttk.Label(status_frame, text="Load a photo to begin", anchor=tk.W)
        self.status_label.pack(side=tk.LEFT, fill=tk.X, expand=True)

        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(2, weight=1)

    # ---- Step handling ----

    def session(self):
        return self.flow.current_session()

    def image_canvas(self):
        return self.image_canvases[self.flow.step]

    def show_step(self, step):
        self.cancel_drag()
        if not self.flow.go_to(step):
            self.status_label.config(text="Finish the top view before measuring height")
            return

        self.step_label.config(text=STEP_TEXT[step])
        self.ref_length_var.set(f"{self.session().calibrator.get_scale_length():.2f}")
        self.refresh()

    # ---- Photo loading ----

    def load_image(self):
        file_path = filedialog.askopenfilename(
            title=f"Select {self.flow.step} photo",
            filetypes=[("Image files", "*.jpg *.jpeg *.png *.bmp *.heic *.heif"), ("All files", "*.*")]
        )

        if file_path:
            self.load_image_from_path(file_path)

    def load_image_from_path(self, file_path, step=None):
        """Load a photo for the given step (default: current step)"""
        if step is None:
            step = self.flow.step
        session = self.flow.top if step == MeasurementFlow.TOP else self.flow.side

        session.load_photo(file_path)
        image = read_image(file_path)
        self.images[step] = image
        if image is None:
            self.status_label.config(text=f"Error: Could not load {file_path}")
            self.refresh()
            return

        height, width = image.shape[:2]
        session.set_image_size(width, height)
        self.image_canvases[step].reset_view()
        logging.info(f"Loaded {step} photo {file_path} ({width}x{height})")
        self.refresh()

    # ---- Settings ----

    def on_ref_length_changed(self, *args):
        try:
            self.session().set_reference_length(float(self.ref_length_var.get()))
        except ValueError:
            self.status_label.config(text="Error: Reference length must be a positive number")
            return
        self.refresh()

    def on_units_changed(self, *args):
        self.converter.set_units(self.units.get())
        self.update_stats()

    # ---- Zoom ----

    def zoom_in(self, center_x=None, center_y=None):
        self.image_canvas().zoom_in(center_x, center_y)
        self.display_on_canvas()

    def zoom_out(self, center_x=None, center_y=None):
        self.image_canvas().zoom_out(center_x, center_y)
        self.display_on_canvas()

    def zoom_fit(self):
        self.image_canvas().reset_view()
        self.display_on_canvas()

    def on_mouse_wheel(self, event):
        if event.delta > 0:
            self.zoom_in(event.x, event.y)
        else:
            self.zoom_out(event.x, event.y)

    def on_canvas_resize(self, event):
        for helper in self.image_canvases.values():
            helper.update_canvas_size(event.width, event.height)
        self.display_on_canvas()

    # ---- Pointer handling ----

    def on_canvas_click(self, event):
        if self.images[self.flow.step] is None:
            return

        helper = self.image_canvas()
        point = helper.canvas_to_image_coords(event.x, event.y)
        threshold = helper.canvas_to_image_distance(HANDLE_THRESHOLD)

        if self.session().editor.pointer_down(point, threshold):
            self.canvas.config(cursor="fleur" if self.session().editor.active.target == BODY else "hand2")
            self.display_on_canvas()
        else:
            helper.start_pan(event.x, event.y)
            self.canvas.config(cursor="fleur")

    def on_canvas_drag(self, event):
        helper = self.image_canvas()
        editor = self.session().editor

        if editor.is_dragging():
            point = helper.canvas_to_image_coords(event.x, event.y)
            if editor.pointer_move(point):
                self.flush_job = self.root.after(FRAME_MS, self.flush_drag)
        elif helper.update_pan(event.x, event.y):
            self.display_on_canvas()

    def flush_drag(self):
        self.flush_job = None
        if self.session().editor.flush():
            self.refresh()

    def on_canvas_release(self, event):
        helper = self.image_canvas()
        editor = self.session().editor

        if editor.is_dragging():
            self._cancel_flush_job()
            editor.pointer_up()
            self.refresh()
        elif helper.panning:
            helper.end_pan()
        self.canvas.config(cursor="cross")

    def cancel_drag(self):
        """Abort any drag in progress (pointer-cancel)"""
        self._cancel_flush_job()
        for session in (self.flow.top, self.flow.side):
            session.editor.cancel()
        self.canvas.config(cursor="cross")

    def _cancel_flush_job(self):
        if self.flush_job is not None:
            self.root.after_cancel(self.flush_job)
            self.flush_job = None

    # ---- Rendering ----

    def refresh(self):
        self.display_on_canvas()
        self.update_stats()

    def display_on_canvas(self):
        image = self.images[self.flow.step]
        helper = self.image_canvas()
        if image is None:
            helper.clear()
            self.canvas.create_text(self.canvas.winfo_width() // 2 or self.canvas_width // 2,
                                    self.canvas.winfo_height() // 2 or self.canvas_height // 2,
                                    text=f"Upload a {self.flow.step} photo to begin", fill="white")
            return

        session = self.session()

        def draw_overlay(canvas_image):
            if self.flow.step == MeasurementFlow.TOP:
                self._draw_rect(canvas_image, helper, session.rect)
            else:
                self._draw_line(canvas_image, helper, session.height_line.get_points(), MEASURE_COLOR)
            self._draw_line(canvas_image, helper, session.calibrator.get_points(), CAL_COLOR)

        helper.display_image(image, overlay_callback=draw_overlay,
                             magnifier_point=session.editor.drag_position)
        self.zoom_label.config(text=f"{helper.get_zoom_percentage()}%")

    def _draw_line(self, canvas_image, helper, points, color):
        (ax, ay), (bx, by) = [helper.image_to_canvas_coords(*pt) for pt in points]
        cv3.line(canvas_image, int(ax), int(ay), int(bx), int(by), color=color, t=2)
        for x, y in ((ax, ay), (bx, by)):
            cv3.circle(canvas_image, int(x), int(y), 9, color=color, t=2)
            cv3.circle(canvas_image, int(x), int(y), 3, color=color, fill=True)

    def _draw_rect(self, canvas_image, helper, rect):
        corners = [helper.image_to_canvas_coords(*pt) for pt in rect.corners().values()]
        for i, (x, y) in enumerate(corners):
            nx, ny = corners[(i + 1) % len(corners)]
            cv3.line(canvas_image, int(x), int(y), int(nx), int(ny), color=RECT_COLOR, t=1)
        for x, y in corners:
            cv3.circle(canvas_image, int(x), int(y), 9, color=HANDLE_COLOR, t=2)

    def update_stats(self):
        session = self.session()
        conv = self.converter
        self.scale_label.config(text=f"px per mm (image): {fmt(session.get_scale(), 2)}")

        if self.flow.step == MeasurementFlow.TOP:
            face = session.top_face()
            text = (f"Length: {conv.format_length(face.length_mm)}   "
                    f"Width: {conv.format_length(face.width_mm)}   "
                    f"Area: {conv.format_area(face.area_cm2)}")
        else:
            text = f"Height: {conv.format_length(session.height_mm())}"
        if session.loaded and not session.is_calibrated():
            text += "   (uncalibrated)"
        self.stats_label.config(text=text)

        self.side_step_btn.config(state=tk.NORMAL if self.flow.can_advance() else tk.DISABLED)

        rec = self.flow.recommendation()
        if rec is None:
            self.result_label.config(text="", bg=self.root.cget("bg"))
        else:
            self.result_label.config(text=f"{rec.display_label}: {rec.reason}", bg=rec.display_color)

        self.status_label.config(text=session.get_status_message())


def main():
    parser = argparse.ArgumentParser(description='Parcel Measure - measure parcels from two photos')
    parser.add_argument('top_image', nargs='?', help='Top-view photo to load on startup')
    parser.add_argument('side_image', nargs='?', help='Side-view photo to load on startup')
    parser.add_argument('--ref-length', type=float, default=CREDIT_CARD_WIDTH_MM,
                        help=f'Reference object length in mm (default: {CREDIT_CARD_WIDTH_MM}, card width)')
    parser.add_argument('--units', choices=UnitConverter.UNITS, default='mm',
                        help='Display units for dimensions (default: mm)')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')
    args = parser.parse_args()

    if args.ref_length <= 0:
        parser.error("--ref-length must be positive")

    logging.basicConfig(level=args.log_level, format='%(levelname)s %(message)s')

    root = tk.Tk()
    app = ParcelMeasureGUI(root, reference_length=args.ref_length, units=args.units)

    # Ensure UI is fully initialized before loading images
    root.update_idletasks()
    if args.top_image:
        app.load_image_from_path(args.top_image, step=MeasurementFlow.TOP)
    if args.side_image:
        app.load_image_from_path(args.side_image, step=MeasurementFlow.SIDE)

    root.mainloop()


if __name__ == "__main__":
    main()
