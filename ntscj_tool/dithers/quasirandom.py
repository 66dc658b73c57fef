"""Quasirandom dithering from the R2 low-discrepancy sequence (default).

For 1-indexed pixel coordinates (x, y):

    t = frac(x * 0.7548776662 + y * 0.56984029)

folded into a triangle wave: 2t below 0.5, 2 - 2t above it. At exactly 0.5
the value is left at 0.5, so a fully transparent black pixel next to an
opaque edge is never bumped up to 1. The dither term is added to
value * 255 and floored.

Red uses a mirrored x, blue a mirrored y, green unmirrored, as with the
ordered strategy. Every pixel is computed from its own coordinates alone,
so swizzled textures come out the same as unswizzled ones.

Example:
    ntscj-tool srgb-to-ntscj in.png out.png --dither quasirandom
"""

import numpy as np

from ntscj_tool.core.quantize import clamp_byte, clamp_bytes, mirror, mirror_grid
from ntscj_tool.core.types import CHANNELS, Dither

dither = Dither(
    name='quasirandom',
    help='R2 sequence dither, stateless and safe for swizzled textures (default).',
)

# Plastic-number generalisation of the golden ratio for two dimensions
R2_X = 0.7548776662
R2_Y = 0.56984029


def triangle(t: float) -> float:
    """Fold t in [0, 1) into [0, 1), leaving exactly 0.5 as is."""
    if t < 0.5:
        return 2.0 * t
    if t > 0.5:
        return 2.0 - 2.0 * t
    return t


def r2_offset(x: int, y: int) -> float:
    """Triangle-folded R2 dither term for 0-indexed (x, y)."""
    return triangle(((x + 1) * R2_X + (y + 1) * R2_Y) % 1.0)


def r2_offsets(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Vectorised r2_offset over coordinate grids."""
    t = np.mod((xs + 1) * R2_X + (ys + 1) * R2_Y, 1.0)
    return np.where(t < 0.5, 2.0 * t, np.where(t > 0.5, 2.0 - 2.0 * t, t))


@dither.pixel
def quantize(value: float, x: int, y: int, channel: int, width: int, height: int) -> int:
    mx, my = mirror(x, y, channel, width, height)
    return clamp_byte(value * 255.0 + r2_offset(mx, my))


@dither.run
def run(values: np.ndarray, width: int, height: int, y0: int) -> np.ndarray:
    rows = values.shape[0]
    out = np.empty(values.shape, dtype=np.uint8)
    for c in CHANNELS:
        xs, ys = mirror_grid(c, width, height, y0, rows)
        out[..., c] = clamp_bytes(values[..., c] * 255.0 + r2_offsets(xs, ys))
    return out
