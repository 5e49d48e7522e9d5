"""Paint draw commands onto a BGR numpy raster with OpenCV."""

from __future__ import annotations

from typing import Iterable

import cv2
import numpy as np

from .geometry import SeatRect, Size
from .render import Clear, DrawCommand, DrawImage, FillRect, StrokeRect, Text

FONT = cv2.FONT_HERSHEY_SIMPLEX


def _bgr(rgb) -> tuple[int, int, int]:
    r, g, b = rgb[:3]
    return int(b), int(g), int(r)


def _corners(rect: SeatRect) -> tuple[tuple[int, int], tuple[int, int]]:
    return (
        (int(round(rect.top_left.x)), int(round(rect.top_left.y))),
        (int(round(rect.bottom_right.x)), int(round(rect.bottom_right.y))),
    )


def _fill(canvas: np.ndarray, rect: SeatRect, rgba) -> None:
    alpha = float(rgba[3])
    p1, p2 = _corners(rect)
    if alpha >= 1.0:
        cv2.rectangle(canvas, p1, p2, _bgr(rgba), thickness=-1)
        return
    overlay = canvas.copy()
    cv2.rectangle(overlay, p1, p2, _bgr(rgba), thickness=-1)
    cv2.addWeighted(overlay, alpha, canvas, 1.0 - alpha, 0, dst=canvas)


def _text(canvas: np.ndarray, cmd: Text) -> None:
    # Hershey glyphs are roughly 22px tall at scale 1.0
    scale = cmd.font_px / 22.0
    (tw, th), _ = cv2.getTextSize(cmd.text, FONT, scale, 1)
    org = (int(round(cmd.at.x - tw / 2)), int(round(cmd.at.y + th / 2)))
    cv2.putText(canvas, cmd.text, org, FONT, scale, _bgr(cmd.rgb), 1, cv2.LINE_AA)


def paint(commands: Iterable[DrawCommand], size: Size) -> np.ndarray:
    canvas = np.zeros((max(size.height, 0), max(size.width, 0), 3), dtype=np.uint8)
    if size.is_empty:
        return canvas
    for cmd in commands:
        if isinstance(cmd, Clear):
            canvas[:] = 0
        elif isinstance(cmd, DrawImage):
            if cmd.source is not None:
                src = cmd.source
                if src.ndim == 2:
                    src = cv2.cvtColor(src, cv2.COLOR_GRAY2BGR)
                elif src.shape[2] == 4:
                    src = cv2.cvtColor(src, cv2.COLOR_BGRA2BGR)
                canvas[:] = cv2.resize(src, (size.width, size.height), interpolation=cv2.INTER_AREA)
        elif isinstance(cmd, FillRect):
            _fill(canvas, cmd.rect, cmd.rgba)
        elif isinstance(cmd, StrokeRect):
            p1, p2 = _corners(cmd.rect)
            cv2.rectangle(canvas, p1, p2, _bgr(cmd.rgb), cmd.line_width)
        elif isinstance(cmd, Text):
            _text(canvas, cmd)
    return canvas
