"""Owned RGBA8 pixel buffers shared by the texture derivation stages."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# Rec. 601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


@dataclass(frozen=True)
class PixelBuffer:
    """Width x height x RGBA8 image data.

    The array is always a private, read-only copy so that transforms never
    mutate a decoder's buffer or each other's output.
    """

    pixels: np.ndarray  # (H, W, 4) uint8

    def __post_init__(self) -> None:
        arr = self.pixels
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"PixelBuffer expects (H, W, 4) data, got {arr.shape}")
        if arr.dtype != np.uint8:
            raise ValueError(f"PixelBuffer expects uint8 data, got {arr.dtype}")
        owned = np.array(arr, dtype=np.uint8, copy=True)
        owned.setflags(write=False)
        object.__setattr__(self, "pixels", owned)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    @classmethod
    def from_array(cls, data: np.ndarray) -> PixelBuffer:
        """Build a buffer from grey (H, W), RGB (H, W, 3) or RGBA (H, W, 4) uint8 data."""
        arr = np.asarray(data)
        if arr.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixel data, got {arr.dtype}")
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise ValueError(f"Expected 2D or 3D pixel data, got {arr.ndim}D")

        channels = arr.shape[2]
        if channels == 1:
            arr = np.concatenate([np.repeat(arr, 3, axis=2), np.full_like(arr, 255)], axis=2)
        elif channels == 3:
            opaque = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, opaque], axis=2)
        elif channels != 4:
            raise ValueError(f"Unsupported channel count: {channels}")
        return cls(arr)

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> PixelBuffer:
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = rgba
        return cls(arr)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Perceptual luminance in [0, 1] of uint8 RGB data, shape (H, W)."""
    return (rgb.astype(np.float64) / 255.0) @ LUMA_WEIGHTS


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round float channel values in [0, 255] to uint8."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)
