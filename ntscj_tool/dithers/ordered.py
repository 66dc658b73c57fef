"""Ordered dithering with a fixed 8x8 Bayer threshold matrix.

Adds matrix[y % 8][x % 8] / 64 (0 .. 63/64 of one step) to value * 255 and
floors. Red reads the matrix at a horizontally mirrored x, blue at a
vertically mirrored y, green unmirrored, so the three channels do not share
one visible pattern.

Stateless and O(1) per pixel. A tile seam in a swizzled texture breaks the
matrix locally but never leaks error across tiles.

Example:
    ntscj-tool ntscj-to-srgb in.png out.png --dither ordered
"""

import numpy as np

from ntscj_tool.core.quantize import clamp_byte, clamp_bytes, mirror, mirror_grid
from ntscj_tool.core.types import CHANNELS, Dither

dither = Dither(
    name='ordered',
    help='8x8 Bayer ordered dither with per-channel mirrored coordinates.',
)

BAYER_8X8 = np.array(
    [
        [0, 32, 8, 40, 2, 34, 10, 42],
        [48, 16, 56, 24, 50, 18, 58, 26],
        [12, 44, 4, 36, 14, 46, 6, 38],
        [60, 28, 52, 20, 62, 30, 54, 22],
        [3, 35, 11, 43, 1, 33, 9, 41],
        [51, 19, 59, 27, 49, 17, 57, 25],
        [15, 47, 7, 39, 13, 45, 5, 37],
        [63, 31, 55, 23, 61, 29, 53, 21],
    ],
    dtype=np.uint8,
)
BAYER_8X8.setflags(write=False)


@dither.pixel
def quantize(value: float, x: int, y: int, channel: int, width: int, height: int) -> int:
    mx, my = mirror(x, y, channel, width, height)
    threshold = int(BAYER_8X8[my % 8][mx % 8])
    return clamp_byte(value * 255.0 + threshold / 64.0)


@dither.run
def run(values: np.ndarray, width: int, height: int, y0: int) -> np.ndarray:
    rows = values.shape[0]
    out = np.empty(values.shape, dtype=np.uint8)
    for c in CHANNELS:
        xs, ys = mirror_grid(c, width, height, y0, rows)
        thresholds = BAYER_8X8[ys % 8, xs % 8].astype(np.float64)
        out[..., c] = clamp_bytes(values[..., c] * 255.0 + thresholds / 64.0)
    return out
