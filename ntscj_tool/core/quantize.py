"""Helpers shared by the dither strategies: byte clamping and coordinate mirroring.

Mirroring decorrelates the dither pattern between channels:
red reads the pattern at a horizontally mirrored x, blue at a vertically
mirrored y, green unmirrored. Mirroring always uses the full image size,
so a band of rows sees the same coordinates it would in a whole-image pass.
"""

import math

import numpy as np

from ntscj_tool.core.types import BLUE, RED


def clamp_byte(value: float) -> int:
    """Floor to an integer and clamp to [0, 255]."""
    return min(255, max(0, math.floor(value)))


def clamp_bytes(values: np.ndarray) -> np.ndarray:
    """Vectorised clamp_byte, returns uint8."""
    return np.clip(np.floor(values), 0, 255).astype(np.uint8)


def mirror(x: int, y: int, channel: int, width: int, height: int) -> tuple[int, int]:
    """Dither-pattern coordinates for one channel of pixel (x, y)."""
    if channel == RED:
        return width - 1 - x, y
    if channel == BLUE:
        return x, height - 1 - y
    return x, y


def mirror_grid(channel: int, width: int, height: int, y0: int, rows: int) -> tuple[np.ndarray, np.ndarray]:
    """Mirrored (xs, ys) int grids of shape (rows, width) for a band starting at y0."""
    xs = np.arange(width)
    ys = np.arange(y0, y0 + rows)
    if channel == RED:
        xs = width - 1 - xs
    elif channel == BLUE:
        ys = height - 1 - ys
    return np.meshgrid(xs, ys)
