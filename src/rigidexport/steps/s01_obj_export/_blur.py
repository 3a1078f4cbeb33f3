"""Separable box blur over RGBA8 buffers."""

from __future__ import annotations

import numpy as np

from rigidexport.core.pixels import PixelBuffer, to_uint8


def _box_mean(data: np.ndarray, radius: int, axis: int) -> np.ndarray:
    """Mean over [i - radius, i + radius] along `axis`, clipped to the bounds.

    Edge samples average over fewer values: the denominator is the number
    of in-bounds samples, not 2 * radius + 1.
    """
    n = data.shape[axis]
    zero = np.zeros_like(np.take(data, [0], axis=axis))
    csum = np.concatenate([zero, np.cumsum(data, axis=axis)], axis=axis)

    idx = np.arange(n)
    lo = np.clip(idx - radius, 0, n)
    hi = np.clip(idx + radius + 1, 0, n)
    sums = np.take(csum, hi, axis=axis) - np.take(csum, lo, axis=axis)

    counts_shape = [1] * data.ndim
    counts_shape[axis] = n
    counts = (hi - lo).reshape(counts_shape)
    return sums / counts


def box_blur(buffer: PixelBuffer, radius: int) -> PixelBuffer:
    """Horizontal then vertical box blur, each channel independently.

    The horizontal result is rounded back to 8 bits before the vertical
    pass, as if the intermediate were an image of its own.
    """
    if radius < 0:
        raise ValueError(f"Blur radius must be >= 0, got {radius}")
    if radius == 0 or buffer.width == 0 or buffer.height == 0:
        return PixelBuffer(buffer.pixels)

    data = buffer.pixels.astype(np.float64)
    horizontal = to_uint8(_box_mean(data, radius, axis=1))
    vertical = to_uint8(_box_mean(horizontal.astype(np.float64), radius, axis=0))
    return PixelBuffer(vertical)
