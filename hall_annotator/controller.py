from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from . import session as sm
from .catalog import Camera
from .evaluator import (
    ColorShiftStrategy,
    MissingPreconditionError,
    OccupancyStrategy,
    evaluate_occupancy,
    set_base_colors,
)
from .geometry import CANVAS_SIZE, CanvasBox, Point, Size, to_canvas_space
from .grid import GridError, HallStats, HallView, Row, hall_stats
from .images import ImageLoadError, load_source
from .render import DrawCommand, render_frame

LOGGER = logging.getLogger(__name__)

_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

Notifier = Callable[[str, str], None]
FrameListener = Callable[[list[DrawCommand]], None]
SeatUpdateListener = Callable[[Point, Point], None]


class AnnotationController:
    """
    Owns the hall view and drawing session for the selected camera.

    Transitions come from ``session``; this class applies their effects to the
    hall, fires the seat-update callback once per commit, and pushes exactly one
    fresh frame to subscribers per state change.
    """

    def __init__(
        self,
        *,
        canvas_size: Size = CANVAS_SIZE,
        strategy: Optional[OccupancyStrategy] = None,
        notifier: Optional[Notifier] = None,
        on_seat_coordinates_update: Optional[SeatUpdateListener] = None,
    ):
        self.canvas_size = canvas_size
        self.strategy: OccupancyStrategy = strategy or ColorShiftStrategy()
        self.notifier = notifier
        self.on_seat_coordinates_update = on_seat_coordinates_update
        self.camera: Optional[Camera] = None
        self.hall: Optional[HallView] = None
        self.session: sm.DrawingSession = sm.IDLE
        self._listeners: list[FrameListener] = []

    # ------------------------------------------------------------------
    # Rendering and notifications
    # ------------------------------------------------------------------
    def subscribe(self, listener: FrameListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def render(self) -> list[DrawCommand]:
        image = self.hall.background_image if self.hall else None
        return render_frame(self.hall, self.session, image, self.canvas_size)

    def redraw(self) -> None:
        commands = self.render()
        for listener in list(self._listeners):
            listener(commands)

    def notify(self, level: str, message: str) -> None:
        LOGGER.log(_LEVELS.get(level, logging.INFO), message)
        if self.notifier is not None:
            self.notifier(level, message)

    def _require_hall(self) -> Optional[HallView]:
        if self.hall is None:
            self.notify("warning", "Select a camera first")
        return self.hall

    # ------------------------------------------------------------------
    # Hall view lifecycle
    # ------------------------------------------------------------------
    def select_camera(self, camera: Camera) -> HallView:
        self.camera = camera
        self.hall = HallView(camera_id=camera.id, camera_name=camera.name)
        self.session = sm.IDLE
        self.notify("success", f"Camera {camera.name} selected")
        self.redraw()
        return self.hall

    def set_background_image(self, image: Any) -> None:
        hall = self._require_hall()
        if hall is None:
            return
        hall.background_image = image
        self.redraw()

    def load_background(self, source: str | Path) -> bool:
        hall = self._require_hall()
        if hall is None:
            return False
        try:
            image = load_source(source)
        except ImageLoadError as e:
            self.notify("error", f"Could not load hall image: {e}")
            return False
        self.set_background_image(image)
        self.notify("success", "Hall image uploaded successfully")
        return True

    def add_row(self, name: str, seat_count: int) -> Optional[Row]:
        hall = self._require_hall()
        if hall is None:
            return None
        try:
            row = hall.add_row(name, seat_count)
        except GridError as e:
            self.notify("warning", f"Cannot add row: {e}")
            return None
        self.notify("success", f"Row {row.name} added with {row.seat_count} seats")
        self.redraw()
        return row

    def stats(self) -> Optional[HallStats]:
        return hall_stats(self.hall) if self.hall else None

    # ------------------------------------------------------------------
    # Drawing session
    # ------------------------------------------------------------------
    def _to_canvas(self, pos: Point, canvas_box: Optional[CanvasBox]) -> Point:
        if canvas_box is None:
            return pos
        return to_canvas_space(pos, canvas_box, self.canvas_size)

    def _apply(self, transition: sm.Transition) -> None:
        self.session, effects = transition
        wants_redraw = False
        for effect in effects:
            if isinstance(effect, sm.CommitSeat):
                self._commit(effect)
            elif isinstance(effect, sm.RowCompleted):
                self.notify("success", f"All seats in row {effect.row_name} have been mapped!")
            elif isinstance(effect, sm.GestureRejected):
                LOGGER.debug("Drag too small to be a seat: %.0fx%.0f", effect.rect.width, effect.rect.height)
            elif isinstance(effect, sm.Ignored):
                LOGGER.debug("Ignored: %s", effect.reason)
            elif isinstance(effect, sm.Redraw):
                wants_redraw = True
        if wants_redraw:
            self.redraw()

    def _commit(self, effect: sm.CommitSeat) -> None:
        rect = effect.rect
        if not self.hall.commit_seat_rectangle(effect.row_name, effect.seat_index, rect.top_left, rect.bottom_right):
            LOGGER.warning("Commit target %s seat %d not found", effect.row_name, effect.seat_index + 1)
            return
        LOGGER.info(
            "Mapped %s%d to (%.0f, %.0f)-(%.0f, %.0f)",
            effect.row_name,
            effect.seat_index + 1,
            rect.top_left.x,
            rect.top_left.y,
            rect.bottom_right.x,
            rect.bottom_right.y,
        )
        if self.on_seat_coordinates_update is not None:
            self.on_seat_coordinates_update(rect.top_left, rect.bottom_right)
        if self.session.active:
            self.notify(
                "success",
                f"Seat {effect.seat_index + 1} mapped. Now mapping seat {self.session.target_seat_number}",
            )

    def start_for_row(self, row_name: str) -> bool:
        hall = self._require_hall()
        if hall is None:
            return False
        try:
            self._apply(sm.start_for_row(self.session, hall, row_name))
        except sm.SessionError as e:
            self.notify("warning", str(e))
            return False
        self.notify("info", f"Started drawing for row {row_name}. Click and drag to define seat areas.")
        return True

    def start_for_seat(self, row_name: str, seat_number: int) -> bool:
        hall = self._require_hall()
        if hall is None:
            return False
        try:
            self._apply(sm.start_for_seat(self.session, hall, row_name, seat_number))
        except sm.SessionError as e:
            self.notify("warning", str(e))
            return False
        self.notify(
            "info", f"Started drawing for row {row_name}, seat {seat_number}. Click and drag to define the seat area."
        )
        return True

    def pointer_down(self, pos: Point, canvas_box: Optional[CanvasBox] = None) -> None:
        self._apply(sm.pointer_down(self.session, self._to_canvas(pos, canvas_box)))

    def pointer_move(self, pos: Point, canvas_box: Optional[CanvasBox] = None) -> None:
        self._apply(sm.pointer_move(self.session, self._to_canvas(pos, canvas_box)))

    def pointer_up(self, pos: Point, canvas_box: Optional[CanvasBox] = None) -> None:
        if self.hall is None:
            return
        self._apply(sm.pointer_up(self.session, self.hall, self._to_canvas(pos, canvas_box)))

    def stop(self) -> None:
        self._apply(sm.stop(self.session))

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------
    def save_base_colors(self) -> int:
        hall = self._require_hall()
        if hall is None:
            return 0
        try:
            saved = set_base_colors(hall, hall.background_image, self.canvas_size)
        except MissingPreconditionError as e:
            self.notify("warning", f"Please {e}")
            return 0
        self.notify("success", f"Base average colors calculated for {saved} seats")
        return saved

    def evaluate_occupancy(self) -> int:
        hall = self._require_hall()
        if hall is None:
            return 0
        try:
            occupied = evaluate_occupancy(hall, hall.background_image, self.strategy, self.canvas_size)
        except MissingPreconditionError as e:
            self.notify("warning", f"Please {e}")
            return 0
        stats = hall_stats(hall)
        self.notify("success", f"Occupancy calculated: {occupied}/{stats.seat_count} seats occupied")
        self.redraw()
        return occupied
