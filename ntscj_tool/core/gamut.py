"""Fixed 3x3 gamut matrices between NTSC-J and sRGB primaries.

Both matrices were derived offline with Bradford chromatic adaptation and
are fitted independently, so they are close to, but not exactly, inverses
of each other. Round-tripping through both is lossy even before
quantization.

Matrices act on linear-light RGB. Output is clamped to [0, 1].
"""

from __future__ import annotations

from enum import Enum

import numpy as np

NTSCJ_TO_SRGB = np.array(
    [
        [1.347563, -0.276464, -0.071099],
        [-0.031150, 0.956512, 0.074638],
        [-0.024443, -0.048150, 1.072594],
    ],
    dtype=np.float64,
)

SRGB_TO_NTSCJ = np.array(
    [
        [0.747740, 0.217854, 0.034406],
        [0.022941, 1.048500, -0.071441],
        [0.018070, 0.052033, 0.929897],
    ],
    dtype=np.float64,
)

NTSCJ_TO_SRGB.setflags(write=False)
SRGB_TO_NTSCJ.setflags(write=False)


class Direction(Enum):
    """Which way to remap. The value is the CLI mode name."""

    NTSCJ_TO_SRGB = 'ntscj-to-srgb'
    SRGB_TO_NTSCJ = 'srgb-to-ntscj'

    @classmethod
    def parse(cls, text: str | Direction) -> Direction:
        if isinstance(text, cls):
            return text
        for d in cls:
            if d.value == text:
                return d
        modes = ', '.join(d.value for d in cls)
        raise ValueError(f'Unknown mode: {text!r}. Expected one of: {modes}')


_MATRICES = {
    Direction.NTSCJ_TO_SRGB: NTSCJ_TO_SRGB,
    Direction.SRGB_TO_NTSCJ: SRGB_TO_NTSCJ,
}


def matrix_for(direction: str | Direction) -> np.ndarray:
    """Return the matrix for a direction (enum or mode name)."""
    return _MATRICES[Direction.parse(direction)]


def apply(matrix: np.ndarray, linear) -> np.ndarray:
    """Multiply linear RGB by matrix and clamp to [0, 1].

    `linear` is a single colour of shape (3,) or any array of colours with
    the channel on the last axis.
    """
    rgb = np.asarray(linear, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    # elementwise rather than matmul so every colour sums in the same order
    out = np.stack([m[0] * r + m[1] * g + m[2] * b for m in matrix], axis=-1)
    return np.clip(out, 0.0, 1.0)
