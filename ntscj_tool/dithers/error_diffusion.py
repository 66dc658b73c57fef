"""Floyd-Steinberg error diffusion.

Each channel gets a float accumulator the size of the image, seeded with the
gamma-encoded values. Pixels are visited in raster order. Each one is
rounded to the nearest byte, and the rounding error (as a fraction of full
scale) is pushed to the unvisited neighbours:

         [*]  7/16
    3/16 5/16 1/16

The weights sum to 16/16. A neighbour outside the image gets nothing and
its share is dropped, with no wrapping or reflection.

Error crosses tile boundaries, so swizzled textures will show seams. Prefer
quasirandom for those. This strategy is not split across workers.

Example:
    ntscj-tool ntscj-to-srgb in.png out.png --dither error-diffusion
"""

import math

import numpy as np

from ntscj_tool.core.types import CHANNELS, Dither

dither = Dither(
    name='error-diffusion',
    help='Floyd-Steinberg error diffusion in raster order. Not swizzle-safe.',
    stateless=False,
)

# (dx, dy, weight)
WEIGHTS = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)


def diffuse(acc, x: int, y: int, err: float, width: int, height: int) -> float:
    """Spread err from (x, y) into acc. Returns the amount actually delivered."""
    delivered = 0.0
    for dx, dy, weight in WEIGHTS:
        nx = x + dx
        ny = y + dy
        if 0 <= nx < width and ny < height:
            share = err * weight
            acc[ny][nx] += share
            delivered += share
    return delivered


def quantize_plane(plane: np.ndarray) -> np.ndarray:
    """Quantize one (height, width) channel plane of [0, 1] values to uint8."""
    height, width = plane.shape
    # plain lists: per-element numpy indexing dominates the loop otherwise
    acc = plane.astype(np.float64).tolist()
    out = [[0] * width for _ in range(height)]
    for y in range(height):
        row = acc[y]
        for x in range(width):
            level = min(255, max(0, math.floor(row[x] * 255.0 + 0.5)))
            out[y][x] = level
            diffuse(acc, x, y, row[x] - level / 255.0, width, height)
    return np.array(out, dtype=np.uint8).reshape(height, width)


@dither.run
def run(values: np.ndarray, width: int, height: int, y0: int) -> np.ndarray:
    out = np.empty(values.shape, dtype=np.uint8)
    for c in CHANNELS:
        out[..., c] = quantize_plane(values[..., c])
    return out
