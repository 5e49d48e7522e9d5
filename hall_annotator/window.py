"""OpenCV front-end for the annotation controller."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import cv2
import numpy as np

from .canvas import paint
from .controller import AnnotationController
from .geometry import Point

LOGGER = logging.getLogger(__name__)

STATUS_HEIGHT = 48
TOAST_SECONDS = 3.0

_TOAST_COLORS = {
    "info": (255, 200, 120),
    "success": (120, 220, 120),
    "warning": (80, 200, 255),
    "error": (80, 80, 255),
}

HELP = "1-9: draw row | n/p: seat cursor | e: redraw seat | right-click: redraw seat | Esc: stop | b: base colors | o: occupancy | i: next image | q: quit"


@dataclass
class Toast:
    level: str = "info"
    text: str = ""
    until: float = 0.0


class AnnotatorWindow:
    def __init__(self, controller: AnnotationController, window_name: str = "Hall Annotator", images: Sequence[str] = ()):
        self.controller = controller
        self.window_name = window_name
        self.images = list(images)
        self._image_index = -1
        self._frame: Optional[np.ndarray] = None
        self._toast = Toast()
        self._row_cursor = 0
        self._seat_cursor = 1
        controller.notifier = self._on_notice
        self._unsubscribe = controller.subscribe(self._on_frame)

    # ------------------------------------------------------------------
    # Controller callbacks
    # ------------------------------------------------------------------
    def _on_notice(self, level: str, message: str) -> None:
        self._toast = Toast(level, message, time.monotonic() + TOAST_SECONDS)

    def _on_frame(self, commands) -> None:
        self._frame = paint(commands, self.controller.canvas_size)
        self._show()

    def _status_strip(self) -> np.ndarray:
        size = self.controller.canvas_size
        strip = np.full((STATUS_HEIGHT, size.width, 3), 32, dtype=np.uint8)
        s = self.controller.session
        if s.active:
            line = f"Drawing mode: mapping {s.target_row}, seat {s.target_seat_number} ({s.state.value})"
        else:
            row = self._selected_row()
            line = f"Row cursor: {row.name} seat {self._seat_cursor}" if row else "Add rows with --row NAME:COUNT"
        stats = self.controller.stats()
        if stats:
            line += f" | mapped {stats.mapped}/{stats.seat_count} | occupied {stats.occupied}"
        cv2.putText(strip, line, (8, 18), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (230, 230, 230), 1, cv2.LINE_AA)
        if self._toast.until > time.monotonic():
            color = _TOAST_COLORS.get(self._toast.level, (230, 230, 230))
            cv2.putText(strip, self._toast.text, (8, 38), cv2.FONT_HERSHEY_SIMPLEX, 0.45, color, 1, cv2.LINE_AA)
        return strip

    def _show(self) -> None:
        if self._frame is None:
            return
        try:
            cv2.imshow(self.window_name, np.vstack([self._frame, self._status_strip()]))
        except cv2.error as exc:
            LOGGER.debug("Window not ready: %s", exc)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def _selected_row(self):
        hall = self.controller.hall
        if hall is None or not hall.rows:
            return None
        return hall.rows[min(self._row_cursor, len(hall.rows) - 1)]

    def _on_mouse(self, event, x, y, flags, param) -> None:
        # Window coordinates are already canvas-local; the status strip sits below.
        pos = Point(float(x), float(min(y, self.controller.canvas_size.height)))
        if event == cv2.EVENT_LBUTTONDOWN:
            self.controller.pointer_down(pos)
        elif event == cv2.EVENT_MOUSEMOVE:
            self.controller.pointer_move(pos)
        elif event == cv2.EVENT_LBUTTONUP:
            self.controller.pointer_up(pos)
        elif event == cv2.EVENT_RBUTTONDOWN and self.controller.hall is not None:
            hit = self.controller.hall.seat_at(pos)
            if hit is not None:
                row, seat = hit
                self.controller.start_for_seat(row.name, seat.number)

    def next_image(self) -> None:
        if not self.images:
            self.controller.notify("warning", "No images given on the command line")
            return
        self._image_index = (self._image_index + 1) % len(self.images)
        self.controller.load_background(self.images[self._image_index])

    def handle_key(self, key: int) -> bool:
        """Returns False when the window should close."""
        if key < 0 or key == 255:
            return True
        ch = chr(key) if key < 128 else ""
        if ch in ("q", "Q"):
            return False
        if key == 27:
            self.controller.stop()
        elif ch.isdigit() and ch != "0":
            hall = self.controller.hall
            idx = int(ch) - 1
            if hall is not None and idx < len(hall.rows):
                self._row_cursor = idx
                self._seat_cursor = 1
                self.controller.start_for_row(hall.rows[idx].name)
        elif ch in ("n", "p"):
            row = self._selected_row()
            if row is not None:
                step = 1 if ch == "n" else -1
                self._seat_cursor = (self._seat_cursor - 1 + step) % row.seat_count + 1
                self._show()
        elif ch == "e":
            row = self._selected_row()
            if row is not None:
                self.controller.start_for_seat(row.name, self._seat_cursor)
        elif ch == "b":
            self.controller.save_base_colors()
            self._show()
        elif ch == "o":
            self.controller.evaluate_occupancy()
        elif ch == "i":
            self.next_image()
        return True

    def run(self, delay_ms: int = 20) -> None:
        cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(self.window_name, self._on_mouse)
        LOGGER.info(HELP)
        if self.images:
            self.next_image()
        else:
            self.controller.redraw()
        try:
            while True:
                key = cv2.waitKey(delay_ms)
                if not self.handle_key(key & 0xFF if key >= 0 else key):
                    break
                # keep the toast line fresh
                self._show()
                if cv2.getWindowProperty(self.window_name, cv2.WND_PROP_VISIBLE) < 1:
                    break
        finally:
            self._unsubscribe()
            cv2.destroyWindow(self.window_name)
