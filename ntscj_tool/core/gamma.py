"""Transfer curves between gamma-encoded and linear-light channel values.

The default is the piecewise sRGB curve with its linear toe near black.
A pure 2.2 power curve is available as an alternative for material that
bands near black when decoded with a toe segment.

Every function accepts a Python float (returns a float) or a numpy array
(returns a float64 array) and clamps its result to [0, 1].
"""

import numpy as np

SRGB_DECODE_KNEE = 0.04045
SRGB_ENCODE_KNEE = 0.0031308
POWER_GAMMA = 2.2


def _clamp(value):
    if isinstance(value, np.ndarray):
        return np.clip(value, 0.0, 1.0)
    return min(1.0, max(0.0, value))


def to_linear(c):
    """sRGB gamma-encoded value -> linear light."""
    if isinstance(c, np.ndarray):
        c = c.astype(np.float64, copy=False)
        curve = ((np.maximum(c, 0.0) + 0.055) / 1.055) ** 2.4
        return _clamp(np.where(c <= SRGB_DECODE_KNEE, c / 12.92, curve))
    if c <= SRGB_DECODE_KNEE:
        return _clamp(c / 12.92)
    return _clamp(((c + 0.055) / 1.055) ** 2.4)


def to_gamma(c):
    """Linear light -> sRGB gamma-encoded value."""
    if isinstance(c, np.ndarray):
        c = c.astype(np.float64, copy=False)
        curve = 1.055 * np.maximum(c, 0.0) ** (1.0 / 2.4) - 0.055
        curve = np.where(c >= 1.0, 1.0, curve)
        return _clamp(np.where(c <= SRGB_ENCODE_KNEE, c * 12.92, curve))
    if c >= 1.0:
        # 1.055 - 0.055 lands one ulp below 1.0
        return 1.0
    if c <= SRGB_ENCODE_KNEE:
        return _clamp(c * 12.92)
    return _clamp(1.055 * c ** (1.0 / 2.4) - 0.055)


def to_linear_power(c):
    """Pure power-law decode, no toe."""
    if isinstance(c, np.ndarray):
        return _clamp(np.maximum(c.astype(np.float64, copy=False), 0.0) ** POWER_GAMMA)
    return _clamp(max(c, 0.0) ** POWER_GAMMA)


def to_gamma_power(c):
    """Pure power-law encode, no toe."""
    if isinstance(c, np.ndarray):
        return _clamp(np.maximum(c.astype(np.float64, copy=False), 0.0) ** (1.0 / POWER_GAMMA))
    return _clamp(max(c, 0.0) ** (1.0 / POWER_GAMMA))


# curve name -> (decode, encode)
CURVES = {
    'srgb': (to_linear, to_gamma),
    'power': (to_linear_power, to_gamma_power),
}


def get_curve(name: str):
    """Return the (decode, encode) pair for a curve name."""
    if name not in CURVES:
        raise KeyError(f'Unknown gamma curve: {name}. Available: {", ".join(sorted(CURVES))}')
    return CURVES[name]
