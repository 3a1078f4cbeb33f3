"""Texture decoder boundary.

The exporter only needs "reference in, RGBA8 pixels out". Game-format
texture codecs plug in through the `TextureDecoder` protocol; the default
decoder reads ordinary image files with OpenCV.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import numpy as np

from rigidexport.core.errors import TextureReadError
from rigidexport.core.pixels import PixelBuffer

logger = logging.getLogger(__name__)


class TextureDecoder(Protocol):
    def decode(self, ref: str) -> PixelBuffer:
        """Return the texture's pixels or raise TextureReadError."""
        ...


class FileTextureDecoder:
    """Decode texture references as image files below a root directory."""

    def __init__(self, root: Path | None = None):
        self.root = Path(root) if root is not None else None

    def resolve(self, ref: str) -> Path:
        path = Path(ref)
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return path

    def decode(self, ref: str) -> PixelBuffer:
        import cv2

        path = self.resolve(ref)
        if not path.is_file():
            raise TextureReadError(ref, f"file not found: {path}")

        # cv2.imread does not accept non-ASCII paths on every platform
        raw = np.fromfile(str(path), dtype=np.uint8)
        img = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)
        if img is None:
            raise TextureReadError(ref, f"unsupported or corrupt image: {path}")

        try:
            buffer = PixelBuffer.from_array(_to_rgb_order(img))
        except ValueError as exc:
            raise TextureReadError(ref, str(exc)) from exc
        logger.debug(f"Decoded texture {path.name} ({buffer.width}x{buffer.height})")
        return buffer


def _to_rgb_order(img: np.ndarray) -> np.ndarray:
    """8-bit grey, RGB or RGBA from an OpenCV image (grey/BGR/BGRA, 8 or 16 bit)."""
    import cv2

    if img.dtype == np.uint16:
        img = (img.astype(np.float64) / 257.0).round().astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img.astype(np.float64) * 255.0, 0, 255).round().astype(np.uint8)

    if img.ndim == 3 and img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return img
