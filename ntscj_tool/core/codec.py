"""Image file I/O: decode to a flat RGBA8 PixelBuffer and encode it back.

Grey, palette, and RGB images are expanded to RGBA with an opaque alpha.
16-bit greyscale is scaled down to 8 bits; floating-point images are
rejected. Output is always RGBA; the format follows the output file
extension, PNG if there is none. The output is written to a temporary file
beside the destination and renamed over it, so a failed write never leaves
a truncated image at the destination path.
"""

import os

import numpy as np
from PIL import Image, UnidentifiedImageError

from ntscj_tool.core.types import PixelBuffer

# Pillow modes for one-channel integer images wider than 8 bits
_WIDE_GREY_MODES = ('I', 'I;16', 'I;16L', 'I;16B', 'I;16N')


class CodecError(RuntimeError):
    """Image could not be read or written. str(err) is the user-facing message."""


def _to_rgba(img: Image.Image) -> Image.Image:
    if img.mode in _WIDE_GREY_MODES:
        wide = np.clip(np.asarray(img).astype(np.int64), 0, 65535)
        # 65535 -> 255 with rounding, the same scaling libpng applies
        grey = (wide * 255 + 32767) // 65535
        return Image.fromarray(grey.astype(np.uint8)).convert('RGBA')
    if img.mode == 'F':
        raise ValueError('floating-point images are not supported')
    return img.convert('RGBA')


def load_image(path: str) -> PixelBuffer:
    """Read an image file into an RGBA8 PixelBuffer."""
    if not os.path.isfile(path):
        raise CodecError(f'read {path}: file not found')
    try:
        with Image.open(path) as img:
            rgba = _to_rgba(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise CodecError(f'read {path}: {e}') from e
    return PixelBuffer(width=rgba.width, height=rgba.height, data=bytearray(rgba.tobytes()))


def _format_for(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    if not ext:
        return 'PNG'
    fmt = Image.registered_extensions().get(ext)
    if fmt is None:
        raise CodecError(f'write {path}: unknown file extension: {ext}')
    return fmt


def save_image(buffer: PixelBuffer, path: str) -> None:
    """Write an RGBA8 PixelBuffer to path, replacing any existing file only on success."""
    if len(buffer.data) != buffer.size:
        raise CodecError(f'write {path}: buffer holds {len(buffer.data)} bytes, expected {buffer.size}')
    img = Image.frombytes('RGBA', (buffer.width, buffer.height), bytes(buffer.data))
    fmt = _format_for(path)

    tmp_path = f'{path}.tmp.{os.getpid()}'
    try:
        with open(tmp_path, 'wb') as f:
            img.save(f, format=fmt)
        os.replace(tmp_path, path)
    except (OSError, ValueError, KeyError) as e:
        raise CodecError(f'write {path}: {e}') from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
