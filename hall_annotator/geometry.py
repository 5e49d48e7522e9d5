from __future__ import annotations

from dataclasses import dataclass

from shapely.geometry import Point as ShapelyPoint, box


class GeometryError(Exception):
    pass


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


# Logical drawing surface; pointer positions are mapped into this space.
CANVAS_SIZE = Size(800, 600)


@dataclass(frozen=True)
class CanvasBox:
    """Where the canvas sits in viewport space and how large it is displayed."""

    left: float
    top: float
    width: float
    height: float


def to_canvas_space(pointer: Point, canvas_box: CanvasBox, logical: Size = CANVAS_SIZE) -> Point:
    x = pointer.x - canvas_box.left
    y = pointer.y - canvas_box.top
    # Displayed size differs from logical size when the surface is stretched.
    if canvas_box.width > 0 and canvas_box.width != logical.width:
        x *= logical.width / canvas_box.width
    if canvas_box.height > 0 and canvas_box.height != logical.height:
        y *= logical.height / canvas_box.height
    return Point(x, y)


def normalize(a: Point, b: Point) -> tuple[Point, Point]:
    top_left = Point(min(a.x, b.x), min(a.y, b.y))
    bottom_right = Point(max(a.x, b.x), max(a.y, b.y))
    return top_left, bottom_right


@dataclass(frozen=True)
class SeatRect:
    top_left: Point
    bottom_right: Point

    def __post_init__(self) -> None:
        if self.top_left.x > self.bottom_right.x or self.top_left.y > self.bottom_right.y:
            raise GeometryError(f"inverted rectangle: {self.top_left} -> {self.bottom_right}")

    @classmethod
    def from_points(cls, a: Point, b: Point) -> "SeatRect":
        return cls(*normalize(a, b))

    @property
    def width(self) -> float:
        return self.bottom_right.x - self.top_left.x

    @property
    def height(self) -> float:
        return self.bottom_right.y - self.top_left.y

    @property
    def center(self) -> Point:
        return Point(self.top_left.x + self.width / 2, self.top_left.y + self.height / 2)

    def polygon(self):
        return box(self.top_left.x, self.top_left.y, self.bottom_right.x, self.bottom_right.y)

    def contains(self, point: Point) -> bool:
        # covers() so points on the outline count as inside
        return self.polygon().covers(ShapelyPoint(point.x, point.y))


def scale_rect(rect: SeatRect, from_size: Size, to_size: Size) -> SeatRect:
    if from_size.is_empty:
        raise GeometryError(f"cannot scale from empty size {from_size}")
    sx = to_size.width / from_size.width
    sy = to_size.height / from_size.height
    return SeatRect(
        Point(rect.top_left.x * sx, rect.top_left.y * sy),
        Point(rect.bottom_right.x * sx, rect.bottom_right.y * sy),
    )
