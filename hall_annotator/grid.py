from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .geometry import Point, SeatRect


class GridError(Exception):
    pass


@dataclass
class Seat:
    number: int
    rect: Optional[SeatRect] = None
    base_color: Optional[str] = None
    occupied: bool = False

    @property
    def top_left(self) -> Optional[Point]:
        return self.rect.top_left if self.rect else None

    @property
    def bottom_right(self) -> Optional[Point]:
        return self.rect.bottom_right if self.rect else None

    @property
    def is_mapped(self) -> bool:
        return self.rect is not None


class Row:
    """
    A named, fixed-size run of seats. Seat ``i`` is seat number ``i + 1``.
    """

    def __init__(self, name: str, order: int, seat_count: int):
        if seat_count <= 0:
            raise GridError("seat_count must be a positive integer")
        self.name = name
        self.order = order
        self.seats: tuple[Seat, ...] = tuple(Seat(number=i + 1) for i in range(seat_count))

    @property
    def seat_count(self) -> int:
        return len(self.seats)

    def seat(self, index: int) -> Optional[Seat]:
        if 0 <= index < len(self.seats):
            return self.seats[index]
        return None

    def label(self, seat_number: int) -> str:
        return f"{self.name}{seat_number}"


class HallView:
    """
    Seat-mapping state for one camera's hall image.

    Rows are append-only; the background image is an opaque reference that can be
    replaced without touching committed seat rectangles.
    """

    def __init__(self, camera_id: str = "", camera_name: str = "", background_image: Any = None):
        self.camera_id = camera_id
        self.camera_name = camera_name
        self.background_image = background_image
        self.rows: list[Row] = []

    def add_row(self, name: str, seat_count: int) -> Row:
        name = (name or "").strip()
        if not name:
            raise GridError("row name must be a non-empty string")
        if seat_count <= 0:
            raise GridError("seat count must be a positive integer")
        if self.find_row(name) is not None:
            raise GridError(f"row {name!r} already exists")
        row = Row(name=name, order=len(self.rows) + 1, seat_count=seat_count)
        self.rows.append(row)
        return row

    def find_row(self, name: str) -> Optional[Row]:
        name = (name or "").strip()
        for row in self.rows:
            if row.name == name:
                return row
        return None

    def commit_seat_rectangle(self, row_name: str, seat_index: int, top_left: Point, bottom_right: Point) -> bool:
        row = self.find_row(row_name)
        if row is None:
            return False
        seat = row.seat(seat_index)
        if seat is None:
            return False
        seat.rect = SeatRect.from_points(top_left, bottom_right)
        return True

    def iter_seats(self) -> Iterator[tuple[Row, Seat]]:
        for row in self.rows:
            for seat in row.seats:
                yield row, seat

    def mapped_seats(self) -> Iterator[tuple[Row, Seat]]:
        return ((row, seat) for row, seat in self.iter_seats() if seat.is_mapped)

    def seat_at(self, point: Point) -> Optional[tuple[Row, Seat]]:
        hit = None
        for row, seat in self.mapped_seats():
            if seat.rect.contains(point):
                hit = (row, seat)
        return hit


@dataclass(frozen=True)
class RowStats:
    name: str
    seat_count: int
    mapped: int
    occupied: int
    with_base_color: int

    @property
    def mapping_percent(self) -> float:
        return _percent(self.mapped, self.seat_count)

    @property
    def occupancy_percent(self) -> float:
        return _percent(self.occupied, self.seat_count)


@dataclass(frozen=True)
class HallStats:
    row_count: int
    seat_count: int
    mapped: int
    occupied: int
    with_base_color: int
    rows: list[RowStats] = field(default_factory=list)

    @property
    def mapping_percent(self) -> float:
        return _percent(self.mapped, self.seat_count)

    @property
    def occupancy_percent(self) -> float:
        return _percent(self.occupied, self.seat_count)


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100.0 if whole > 0 else 0.0


def row_stats(row: Row) -> RowStats:
    return RowStats(
        name=row.name,
        seat_count=row.seat_count,
        mapped=sum(1 for s in row.seats if s.is_mapped),
        occupied=sum(1 for s in row.seats if s.occupied),
        with_base_color=sum(1 for s in row.seats if s.base_color),
    )


def hall_stats(hall: HallView) -> HallStats:
    per_row = [row_stats(r) for r in hall.rows]
    return HallStats(
        row_count=len(per_row),
        seat_count=sum(r.seat_count for r in per_row),
        mapped=sum(r.mapped for r in per_row),
        occupied=sum(r.occupied for r in per_row),
        with_base_color=sum(r.with_base_color for r in per_row),
        rows=per_row,
    )
