"""PNG writing and normalization of emitted images.

Every image the exporter produces ends up as an 8-bit-per-channel,
4-channel PNG (32 bpp), whatever depth or channel count the encoder chain
would otherwise have picked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from rigidexport.core.errors import ImageNormalizationFailure, OutputWriteFailure
from rigidexport.core.pixels import PixelBuffer

logger = logging.getLogger(__name__)

# Lossless; trades a little speed for smaller files
PNG_COMPRESSION = 6


@dataclass(frozen=True)
class NormalizationOutcome:
    path: Path
    ok: bool
    error: str | None = None


def _encode_png(bgra: np.ndarray, path: Path) -> None:
    import cv2

    ok, encoded = cv2.imencode(".png", bgra, [cv2.IMWRITE_PNG_COMPRESSION, PNG_COMPRESSION])
    if not ok:
        raise OSError("PNG encoder rejected the image")
    encoded.tofile(str(path))


def write_png(buffer: PixelBuffer, path: Path) -> Path:
    """Write a PixelBuffer as an RGBA PNG.

    Raises:
        OutputWriteFailure: if the image cannot be encoded or written.
    """
    import cv2

    path = Path(path)
    try:
        bgra = cv2.cvtColor(np.ascontiguousarray(buffer.pixels), cv2.COLOR_RGBA2BGRA)
        _encode_png(bgra, path)
    except (OSError, cv2.error) as exc:
        raise OutputWriteFailure(path, str(exc)) from exc
    logger.debug(f"Wrote {path.name} ({buffer.width}x{buffer.height})")
    return path


def _redraw_rgba8(path: Path) -> np.ndarray:
    """Read `path` and return it as a fresh 8-bit BGRA array of the same size."""
    import cv2

    raw = np.fromfile(str(path), dtype=np.uint8)
    img = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageNormalizationFailure(f"cannot decode {path}")

    if img.dtype == np.uint16:
        img = (img.astype(np.float64) / 257.0).round().astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ImageNormalizationFailure(f"unsupported sample type {img.dtype} in {path}")

    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
    elif img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
    elif img.shape[2] != 4:
        raise ImageNormalizationFailure(f"unsupported channel count {img.shape[2]} in {path}")

    height, width = img.shape[:2]
    # Identity-scale redraw into a new buffer with the highest quality filter
    return cv2.resize(img, (width, height), interpolation=cv2.INTER_LANCZOS4)


def normalize_image(path: Path) -> NormalizationOutcome:
    """Re-encode the image at `path` in place as a 32-bit RGBA PNG.

    Never raises: a failure leaves the file as it was and is reported in
    the returned outcome.
    """
    import cv2

    path = Path(path)
    try:
        bgra = _redraw_rgba8(path)
        _encode_png(bgra, path)
    except (OSError, cv2.error, ImageNormalizationFailure) as exc:
        logger.debug(f"Normalization skipped for {path.name}: {exc}")
        return NormalizationOutcome(path=path, ok=False, error=str(exc))
    return NormalizationOutcome(path=path, ok=True)
