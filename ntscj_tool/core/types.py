"""Shared types for ntscj-tool: PixelBuffer, Dither, ConversionReport, channel indices."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np

# Channel indices into an RGBA pixel. Alpha is never quantized.
RED = 0
GREEN = 1
BLUE = 2
ALPHA = 3
CHANNELS = (RED, GREEN, BLUE)


@dataclass
class PixelBuffer:
    """A flat, row-major RGBA8 image with no row padding."""

    width: int
    height: int
    data: bytearray = field(default_factory=bytearray)

    @property
    def size(self) -> int:
        return self.width * self.height * 4

    def as_array(self) -> np.ndarray:
        """Writable (height, width, 4) uint8 view over data. No copy."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)


class Dither:
    """A self-registering quantization strategy.

    Usage in a dither module:

        dither = Dither(name='ordered', help='8x8 Bayer threshold matrix')

        @dither.pixel
        def quantize(value, x, y, channel, width, height):
            ...

        @dither.run
        def run(values, width, height, y0):
            ...

    `run` receives gamma-encoded values in [0, 1] shaped (rows, width, 3),
    where the first row sits at image row `y0`, and returns uint8 bytes of the
    same shape. `width` and `height` are always the full image size.
    """

    def __init__(self, name: str, help: str = '', stateless: bool = True):
        self.name = name
        self.help = help
        self.stateless = stateless  # safe to split into row bands
        self._run_fn: Callable | None = None
        self._pixel_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the whole-band function."""
        self._run_fn = fn
        return fn

    def pixel(self, fn: Callable) -> Callable:
        """Decorator to register the per-pixel function."""
        self._pixel_fn = fn
        return fn

    def execute(self, values: np.ndarray, width: int, height: int, y0: int = 0) -> np.ndarray:
        """Quantize a band of gamma-encoded RGB values to bytes."""
        if self._run_fn is None:
            raise RuntimeError(f'Dither {self.name} has no run function')
        return self._run_fn(values, width, height, y0)

    def quantize(self, value: float, x: int, y: int, channel: int, width: int, height: int) -> int:
        """Quantize one channel value of one pixel."""
        if self._pixel_fn is None:
            raise RuntimeError(f'Dither {self.name} has no per-pixel form')
        return self._pixel_fn(value, x, y, channel, width, height)


@dataclass
class ConversionReport:
    """Summary of one image conversion for text/JSON output."""

    input_path: str = ''
    output_path: str = ''
    width: int = 0
    height: int = 0
    direction: str = ''
    dither: str = ''
    curve: str = ''
    workers: int = 1
    elapsed: float = 0.0
    changed_pixels: int = 0
    mean_delta: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height
