"""Alpha premultiplication of a colour map by a luminance mask."""

from __future__ import annotations

import logging

import numpy as np

from rigidexport.core.pixels import PixelBuffer, luminance, to_uint8

logger = logging.getLogger(__name__)


def premultiply(color: PixelBuffer, mask: PixelBuffer) -> PixelBuffer:
    """Scale `color` RGB by the mask luminance and store it as alpha.

    Buffers of different sizes are cropped to their overlap, not resampled.
    """
    width = min(color.width, mask.width)
    height = min(color.height, mask.height)
    if (color.width, color.height) != (mask.width, mask.height):
        logger.debug(
            f"Mask {mask.width}x{mask.height} differs from colour "
            f"{color.width}x{color.height}, cropping to {width}x{height}"
        )

    rgb = color.rgb[:height, :width].astype(np.float64)
    alpha = luminance(mask.rgb[:height, :width])

    out = np.empty((height, width, 4), dtype=np.uint8)
    out[:, :, :3] = to_uint8(rgb * alpha[:, :, np.newaxis])
    out[:, :, 3] = to_uint8(alpha * 255.0)
    return PixelBuffer(out)
