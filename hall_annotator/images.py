from __future__ import annotations

import base64
import binascii
import mimetypes
from pathlib import Path

import cv2
import numpy as np


class ImageLoadError(Exception):
    pass


def _decode(data: bytes, origin: str) -> np.ndarray:
    buf = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    if image is None:
        raise ImageLoadError(f"could not decode image from {origin}")
    return image


def load_image(path: str | Path) -> np.ndarray:
    p = Path(path)
    if not p.exists():
        raise ImageLoadError(f"image file not found: {p}")
    return _decode(p.read_bytes(), str(p))


def encode_data_url(path: str | Path) -> str:
    p = Path(path)
    if not p.exists():
        raise ImageLoadError(f"image file not found: {p}")
    mime = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(p.read_bytes()).decode('ascii')}"


def decode_data_url(url: str) -> np.ndarray:
    header, sep, payload = url.partition(",")
    if not header.startswith("data:") or not sep or not header.endswith(";base64"):
        raise ImageLoadError("expected a base64 data URL")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError(f"invalid base64 payload: {e}") from e
    return _decode(data, "data URL")


def load_source(source: str | Path) -> np.ndarray:
    """Load either a filesystem path or a ``data:`` URL."""
    if isinstance(source, str) and source.startswith("data:"):
        return decode_data_url(source)
    return load_image(source)
