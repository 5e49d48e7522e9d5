"""
Base-color capture and occupancy evaluation over a whole hall.

Seat rectangles live in canvas space while images are drawn scaled to fill the
canvas, so every region is scaled into image pixels before sampling. How a
seat is judged occupied is an injected strategy: anything callable as
``strategy(region, base_color) -> bool``.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any, Optional, Protocol

import numpy as np

from .geometry import CANVAS_SIZE, SeatRect, Size, scale_rect
from .grid import HallView

LOGGER = logging.getLogger(__name__)

# Used when the image carries no pixel data to sample (rgb(123,123,123)).
PLACEHOLDER_BASE_COLOR = "#7b7b7b"


class MissingPreconditionError(Exception):
    pass


class OccupancyStrategy(Protocol):
    def __call__(self, region: Optional[np.ndarray], base_color: str) -> bool: ...


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    c = color.lstrip("#")
    if len(c) != 6:
        raise ValueError(f"not a #rrggbb color: {color!r}")
    return int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)


def rgb_to_hex(rgb) -> str:
    r, g, b = (max(0, min(255, int(round(v)))) for v in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def _has_pixels(image: Any) -> bool:
    return isinstance(image, np.ndarray) and image.ndim in (2, 3) and image.size > 0


def crop_region(image: Any, rect: SeatRect, canvas_size: Size = CANVAS_SIZE) -> Optional[np.ndarray]:
    if not _has_pixels(image):
        return None
    h, w = image.shape[:2]
    r = scale_rect(rect, canvas_size, Size(w, h))
    x1 = max(0, min(w, int(math.floor(r.top_left.x))))
    y1 = max(0, min(h, int(math.floor(r.top_left.y))))
    x2 = max(0, min(w, int(math.ceil(r.bottom_right.x))))
    y2 = max(0, min(h, int(math.ceil(r.bottom_right.y))))
    region = image[y1:y2, x1:x2]
    return region if region.size else None


def mean_rgb(region: np.ndarray) -> tuple[float, float, float]:
    if region.ndim == 2:
        v = float(region.mean())
        return v, v, v
    # OpenCV rasters are BGR
    b, g, r = region.reshape(-1, region.shape[-1])[:, :3].mean(axis=0)
    return float(r), float(g), float(b)


class ColorShiftStrategy:
    """Occupied when the region's mean color drifts from the baseline by more than ``threshold``."""

    def __init__(self, threshold: float = 40.0):
        self.threshold = float(threshold)

    def __call__(self, region: Optional[np.ndarray], base_color: str) -> bool:
        if region is None:
            return False
        current = mean_rgb(region)
        base = hex_to_rgb(base_color)
        return math.dist(current, base) > self.threshold


class RandomStrategy:
    def __init__(self, probability: float = 0.4, seed: Optional[int] = None):
        self.probability = probability
        self._rng = random.Random(seed)

    def __call__(self, region: Optional[np.ndarray], base_color: str) -> bool:
        return self._rng.random() < self.probability


def set_base_colors(hall: HallView, image: Any, canvas_size: Size = CANVAS_SIZE) -> int:
    if image is None:
        raise MissingPreconditionError("upload a hall image before saving base colors")
    if next(hall.mapped_seats(), None) is None:
        raise MissingPreconditionError("map at least one seat before saving base colors")
    saved = 0
    for row, seat in hall.mapped_seats():
        region = crop_region(image, seat.rect, canvas_size)
        seat.base_color = rgb_to_hex(mean_rgb(region)) if region is not None else PLACEHOLDER_BASE_COLOR
        saved += 1
    LOGGER.info("Captured base colors for %d seats", saved)
    return saved


def evaluate_occupancy(
    hall: HallView,
    image: Any,
    strategy: OccupancyStrategy,
    canvas_size: Size = CANVAS_SIZE,
) -> int:
    if not any(seat.base_color for _, seat in hall.iter_seats()):
        raise MissingPreconditionError("save base colors before calculating occupancy")
    occupied = 0
    for row, seat in hall.iter_seats():
        if not seat.base_color or seat.rect is None:
            seat.occupied = False
            continue
        region = crop_region(image, seat.rect, canvas_size)
        seat.occupied = bool(strategy(region, seat.base_color))
        occupied += seat.occupied
    LOGGER.info("Occupancy evaluated: %d seats occupied", occupied)
    return occupied
