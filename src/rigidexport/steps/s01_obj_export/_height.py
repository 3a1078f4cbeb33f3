"""Height/displacement map from a normal map.

Uses the normal map's luminance as a stand-in for height. No slope
integration is done, so the result is an approximation of surface relief
good enough to drive a `disp` slot, not a reconstruction.
"""

from __future__ import annotations

import numpy as np

from rigidexport.core.pixels import PixelBuffer, luminance, to_uint8

# Contrast values closer to zero than this leave the height curve untouched
CONTRAST_EPSILON = 1e-3


def height_values(
    normal_map: PixelBuffer, strength: float = 1.0, contrast: float = 0.0
) -> np.ndarray:
    """Per-pixel height in [0, 1], shape (H, W)."""
    h = (luminance(normal_map.rgb) - 0.5) * strength + 0.5
    if abs(contrast) > CONTRAST_EPSILON:
        h = 0.5 + (h - 0.5) * (1.0 + contrast)
    return np.clip(h, 0.0, 1.0)


def derive_height(
    normal_map: PixelBuffer, strength: float = 1.0, contrast: float = 0.0
) -> PixelBuffer:
    """Greyscale height buffer with the source alpha preserved.

    Args:
        normal_map: Decoded normal map.
        strength: Scale of the deviation from mid grey (0 flattens to 0.5).
        contrast: Extra reshaping around mid grey, in practice -1..1.

    Returns:
        New PixelBuffer, R = G = B = height, A copied from the input.
    """
    grey = to_uint8(height_values(normal_map, strength, contrast) * 255.0)
    out = np.empty_like(normal_map.pixels)
    out[:, :, 0] = grey
    out[:, :, 1] = grey
    out[:, :, 2] = grey
    out[:, :, 3] = normal_map.alpha
    return PixelBuffer(out)
