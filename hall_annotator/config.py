from __future__ import annotations

import os
from dataclasses import dataclass

from .geometry import Size

DEFAULT_CATALOG_URL = "http://127.0.0.1:8000/entities"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    catalog_url: str = DEFAULT_CATALOG_URL
    catalog_timeout: float = 5.0
    canvas_width: int = 800
    canvas_height: int = 600
    occupancy_threshold: float = 40.0
    log_level: str = "INFO"

    @property
    def canvas_size(self) -> Size:
        return Size(self.canvas_width, self.canvas_height)


def _number(env, key: str, default, cast):
    raw = env.get(key)
    if raw is None or not str(raw).strip():
        return default
    try:
        return cast(raw)
    except ValueError as e:
        kind = "an integer" if cast is int else "a number"
        raise ConfigError(f"{key} must be {kind}, got {raw!r}") from e


def load_settings(env=None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        catalog_url=env.get("HALL_ANNOTATOR_CATALOG_URL", DEFAULT_CATALOG_URL),
        catalog_timeout=_number(env, "HALL_ANNOTATOR_CATALOG_TIMEOUT", 5.0, float),
        canvas_width=_number(env, "HALL_ANNOTATOR_CANVAS_WIDTH", 800, int),
        canvas_height=_number(env, "HALL_ANNOTATOR_CANVAS_HEIGHT", 600, int),
        occupancy_threshold=_number(env, "HALL_ANNOTATOR_OCCUPANCY_THRESHOLD", 40.0, float),
        log_level=env.get("HALL_ANNOTATOR_LOG_LEVEL", "INFO").upper(),
    )
