"""
Drawing-mode state machine.

Every transition is a plain function taking the current ``DrawingSession`` and
returning ``(next_session, effects)``. Nothing here touches the grid; the
controller applies ``CommitSeat`` effects to the hall it owns.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from .geometry import Point, SeatRect
from .grid import HallView

# Drags at or below this many pixels on either axis are treated as clicks.
MIN_EXTENT = 10


class SessionError(Exception):
    pass


class SessionState(str, Enum):
    idle = "idle"
    armed = "armed"
    capturing = "capturing"


@dataclass(frozen=True)
class DrawingSession:
    state: SessionState = SessionState.idle
    target_row: Optional[str] = None
    target_seat_index: int = 0
    pointer_down_at: Optional[Point] = None
    pointer_current_at: Optional[Point] = None

    @property
    def active(self) -> bool:
        return self.state is not SessionState.idle

    @property
    def target_seat_number(self) -> int:
        return self.target_seat_index + 1

    @property
    def target_label(self) -> str:
        return f"{self.target_row or ''}{self.target_seat_number}"

    def live_rect(self) -> Optional[SeatRect]:
        if self.state is not SessionState.capturing:
            return None
        if self.pointer_down_at is None or self.pointer_current_at is None:
            return None
        return SeatRect.from_points(self.pointer_down_at, self.pointer_current_at)


IDLE = DrawingSession()


@dataclass(frozen=True)
class CommitSeat:
    row_name: str
    seat_index: int
    rect: SeatRect


@dataclass(frozen=True)
class TargetChanged:
    row_name: str
    seat_index: int


@dataclass(frozen=True)
class RowCompleted:
    row_name: str


@dataclass(frozen=True)
class GestureRejected:
    rect: SeatRect


@dataclass(frozen=True)
class Ignored:
    reason: str


@dataclass(frozen=True)
class Redraw:
    pass


Effect = Union[CommitSeat, TargetChanged, RowCompleted, GestureRejected, Ignored, Redraw]
Transition = tuple[DrawingSession, list[Effect]]


def _arm(hall: HallView, row_name: str, seat_index: int) -> Transition:
    row = hall.find_row(row_name)
    if row is None:
        raise SessionError(f"row {row_name!r} not found")
    if row.seat(seat_index) is None:
        raise SessionError(f"seat {seat_index + 1} out of range for row {row_name!r} ({row.seat_count} seats)")
    nxt = DrawingSession(state=SessionState.armed, target_row=row.name, target_seat_index=seat_index)
    return nxt, [TargetChanged(row.name, seat_index), Redraw()]


def start_for_row(session: DrawingSession, hall: HallView, row_name: str) -> Transition:
    return _arm(hall, row_name, 0)


def start_for_seat(session: DrawingSession, hall: HallView, row_name: str, seat_number: int) -> Transition:
    return _arm(hall, row_name, seat_number - 1)


def pointer_down(session: DrawingSession, pos: Point) -> Transition:
    if session.state is not SessionState.armed:
        return session, [Ignored(f"pointer down while {session.state.value}")]
    nxt = replace(session, state=SessionState.capturing, pointer_down_at=pos, pointer_current_at=pos)
    return nxt, [Redraw()]


def pointer_move(session: DrawingSession, pos: Point) -> Transition:
    if session.state is not SessionState.capturing:
        return session, [Ignored(f"pointer move while {session.state.value}")]
    return replace(session, pointer_current_at=pos), [Redraw()]


def pointer_up(session: DrawingSession, hall: HallView, pos: Point) -> Transition:
    if session.state is not SessionState.capturing or session.pointer_down_at is None:
        return session, [Ignored(f"pointer up while {session.state.value}")]

    rect = SeatRect.from_points(session.pointer_down_at, pos)
    armed = replace(session, state=SessionState.armed, pointer_down_at=None, pointer_current_at=None)
    if rect.width <= MIN_EXTENT or rect.height <= MIN_EXTENT:
        return armed, [GestureRejected(rect), Redraw()]

    row = hall.find_row(session.target_row or "")
    if row is None:
        return IDLE, [Ignored(f"target row {session.target_row!r} vanished"), Redraw()]

    effects: list[Effect] = [CommitSeat(row.name, session.target_seat_index, rect)]
    if session.target_seat_index < row.seat_count - 1:
        nxt = replace(armed, target_seat_index=session.target_seat_index + 1)
        effects.append(TargetChanged(row.name, nxt.target_seat_index))
    else:
        nxt = IDLE
        effects.append(RowCompleted(row.name))
    effects.append(Redraw())
    return nxt, effects


def stop(session: DrawingSession) -> Transition:
    if not session.active:
        return IDLE, []
    return IDLE, [Redraw()]
