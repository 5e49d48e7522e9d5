from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .geometry import CANVAS_SIZE, Point, SeatRect, Size
from .grid import HallView, row_stats
from .session import DrawingSession

RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, float]

PLACEHOLDER_FILL: RGB = (243, 244, 246)
PLACEHOLDER_TEXT: RGB = (156, 163, 175)
PLACEHOLDER_PROMPT = "Upload hall image to begin"

OCCUPIED_FILL: RGBA = (239, 68, 68, 0.6)
OCCUPIED_STROKE: RGB = (220, 38, 38)
EMPTY_FILL: RGBA = (34, 197, 94, 0.6)
EMPTY_STROKE: RGB = (22, 163, 74)
SEAT_LABEL: RGB = (255, 255, 255)

LIVE_FILL: RGBA = (59, 130, 246, 0.3)
LIVE_STROKE: RGB = (59, 130, 246)
LIVE_LABEL: RGB = (29, 78, 216)

LINE_WIDTH = 2


@dataclass(frozen=True)
class Clear:
    size: Size


@dataclass(frozen=True)
class DrawImage:
    size: Size
    # The raster itself is not part of equality; frames are compared by layout.
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FillRect:
    rect: SeatRect
    rgba: RGBA


@dataclass(frozen=True)
class StrokeRect:
    rect: SeatRect
    rgb: RGB
    line_width: int = LINE_WIDTH


@dataclass(frozen=True)
class Text:
    text: str
    at: Point
    rgb: RGB
    font_px: int


DrawCommand = Union[Clear, DrawImage, FillRect, StrokeRect, Text]


def render_frame(
    hall: Optional[HallView],
    session: DrawingSession,
    image: Any = None,
    size: Size = CANVAS_SIZE,
) -> list[DrawCommand]:
    """
    Build the full frame for the hall view as a list of draw commands.

    Order is: clear, background (image or placeholder), committed seats, then the
    live drag rectangle so it always sits on top. A missing or empty surface
    yields no commands.
    """
    if size is None or size.is_empty:
        return []

    whole = SeatRect(Point(0, 0), Point(size.width, size.height))
    out: list[DrawCommand] = [Clear(size)]
    if image is not None:
        out.append(DrawImage(size, image))
    else:
        out.append(FillRect(whole, (*PLACEHOLDER_FILL, 1.0)))
        out.append(Text(PLACEHOLDER_PROMPT, whole.center, PLACEHOLDER_TEXT, 16))

    if hall is not None:
        for row, seat in hall.mapped_seats():
            fill, stroke = (OCCUPIED_FILL, OCCUPIED_STROKE) if seat.occupied else (EMPTY_FILL, EMPTY_STROKE)
            out.append(FillRect(seat.rect, fill))
            out.append(StrokeRect(seat.rect, stroke))
            out.append(Text(row.label(seat.number), seat.rect.center, SEAT_LABEL, 12))

    live = session.live_rect()
    if live is not None:
        out.append(FillRect(live, LIVE_FILL))
        out.append(StrokeRect(live, LIVE_STROKE))
        out.append(Text(session.target_label, live.center, LIVE_LABEL, 14))
    return out


def _cell(seat, width: int) -> str:
    if not seat.is_mapped:
        mark = "."
    elif seat.occupied:
        mark = "X"
    else:
        mark = "o"
    return mark.center(width)


def render_summary(hall: HallView, *, cell_width: int = 3) -> str:
    cell_width = max(1, int(cell_width))
    if not hall.rows:
        return "(no rows)"

    label_width = max(len(r.name) for r in hall.rows) + 2
    widest = max(r.seat_count for r in hall.rows)
    header = " " * label_width + "".join(str(n).center(cell_width) for n in range(1, widest + 1))
    lines = [header]
    for row in hall.rows:
        cells = "".join(_cell(s, cell_width) for s in row.seats)
        stats = row_stats(row)
        pad = " " * (cell_width * (widest - row.seat_count))
        lines.append(f"{row.name.ljust(label_width)}{cells}{pad}  {stats.mapped}/{stats.seat_count} mapped, {stats.occupied} occupied")
    return "\n".join(lines)
