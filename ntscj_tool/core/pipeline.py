"""Per-pixel gamut remapping pipeline.

For every pixel, in place on the caller's RGBA8 buffer:

  1. read R, G, B and normalise to [0, 1]; alpha is left alone
  2. decode to linear light
  3. apply the direction's gamut matrix, clamp to [0, 1]
  4. re-encode
  5. quantize back to bytes with the chosen dither strategy
  6. write the bytes back to the same position

Stateless strategies may be split into row bands across worker threads.
Error diffusion always runs as one raster-order pass.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from ntscj_tool import registry
from ntscj_tool.core import gamut
from ntscj_tool.core.codec import load_image, save_image
from ntscj_tool.core.gamma import get_curve
from ntscj_tool.core.gamut import Direction
from ntscj_tool.core.types import ConversionReport, PixelBuffer


def _writable_view(pixels, width: int, height: int) -> memoryview:
    """Validate the buffer against the dimensions and return it as a flat byte view."""
    if width < 0 or height < 0:
        raise ValueError(f'Invalid dimensions: {width}x{height}')
    view = memoryview(pixels)
    if view.readonly:
        raise TypeError('Pixel buffer is read-only')
    expected = width * height * 4
    if view.nbytes != expected:
        raise ValueError(f'Pixel buffer holds {view.nbytes} bytes, expected {expected} for {width}x{height} RGBA8')
    return view.cast('B')


def _convert_band(band: np.ndarray, matrix: np.ndarray, curve: str, dither, width: int, height: int, y0: int) -> None:
    decode, encode = get_curve(curve)
    linear = decode(band[..., :3] / 255.0)
    encoded = encode(gamut.apply(matrix, linear))
    band[..., :3] = dither.execute(encoded, width, height, y0)


def _bands(height: int, workers: int) -> list[tuple[int, int]]:
    """Split rows into at most `workers` contiguous (start, stop) ranges."""
    n = max(1, min(workers, height))
    step = -(-height // n)
    return [(start, min(start + step, height)) for start in range(0, height, step)]


def transform_image(
    pixels,
    width: int,
    height: int,
    direction: str | Direction,
    dither: str = registry.DEFAULT_DITHER,
    curve: str = 'srgb',
    workers: int = 1,
) -> None:
    """Remap an RGBA8 buffer between gamuts, in place.

    `pixels` is any writable buffer of width * height * 4 bytes (bytearray,
    memoryview, uint8 numpy array). Raises ValueError/TypeError on a buffer
    that does not fit the dimensions, KeyError on an unknown dither or curve.
    Nothing is written unless validation passes.
    """
    matrix = gamut.matrix_for(direction)
    strategy = registry.get(dither)
    get_curve(curve)
    view = _writable_view(pixels, width, height)
    if width == 0 or height == 0:
        return
    rgba = np.frombuffer(view, dtype=np.uint8).reshape(height, width, 4)

    if workers <= 1 or not strategy.stateless:
        _convert_band(rgba, matrix, curve, strategy, width, height, 0)
        return

    bands = _bands(height, workers)
    with ThreadPoolExecutor(max_workers=len(bands)) as executor:
        futures = [
            executor.submit(_convert_band, rgba[start:stop], matrix, curve, strategy, width, height, start)
            for start, stop in bands
        ]
        for future in futures:
            future.result()


def transform_buffer(buffer: PixelBuffer, direction: str | Direction, **kwargs) -> None:
    """transform_image for a PixelBuffer."""
    transform_image(buffer.data, buffer.width, buffer.height, direction, **kwargs)


def convert_file(
    input_path: str,
    output_path: str,
    direction: str | Direction,
    dither: str = registry.DEFAULT_DITHER,
    curve: str = 'srgb',
    workers: int = 1,
) -> ConversionReport:
    """Load an image, remap it, and save it.

    Nothing is written until the transform has finished, and the save replaces
    output_path atomically, so a failure never leaves a partial image there.
    """
    direction = Direction.parse(direction)
    buffer = load_image(input_path)
    before = np.array(buffer.as_array()[..., :3], dtype=np.int16)

    started = time.perf_counter()
    transform_buffer(buffer, direction, dither=dither, curve=curve, workers=workers)
    elapsed = time.perf_counter() - started

    save_image(buffer, output_path)

    delta = np.abs(buffer.as_array()[..., :3].astype(np.int16) - before)
    if delta.size:
        changed = int(np.count_nonzero(delta.any(axis=-1)))
        mean_delta = [round(float(v), 3) for v in delta.reshape(-1, 3).mean(axis=0)]
    else:
        changed = 0
        mean_delta = [0.0, 0.0, 0.0]

    return ConversionReport(
        input_path=input_path,
        output_path=output_path,
        width=buffer.width,
        height=buffer.height,
        direction=direction.value,
        dither=dither,
        curve=curve,
        workers=workers,
        elapsed=round(elapsed, 4),
        changed_pixels=changed,
        mean_delta=mean_delta,
    )
