# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Color space conversions.

Conversion chain: sRGB (8-bit) → Linear RGB → XYZ (D65) → XYZ (D50) → CIE Lab

References:
- sRGB: IEC 61966-2-1
- Bradford chromatic adaptation: Lam (1985), as used by ICC v4
- CIE Lab: CIE 15:2004

All conversions are pure NumPy and operate on arrays of shape (..., 3).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


# =============================================================================
# Reference whites and luma weights
# =============================================================================

D65_WHITE = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)
D50_WHITE = np.array([0.96422, 1.0, 0.82521], dtype=np.float64)

# Rec. 709 luma weights applied to linear light
_LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


# =============================================================================
# sRGB ↔ Linear RGB
# =============================================================================


def srgb_to_linear(srgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert sRGB values [0,1] to linear RGB.

    sRGB uses a piecewise gamma curve:
    - For values <= 0.04045: linear/12.92
    - For values > 0.04045: ((value + 0.055) / 1.055) ^ 2.4
    """
    srgb = np.clip(np.asarray(srgb, dtype=np.float64), 0.0, 1.0)
    linear = np.where(
        srgb <= 0.04045,
        srgb / 12.92,
        np.power((srgb + 0.055) / 1.055, 2.4)
    )
    return linear


def linear_to_srgb(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert linear RGB to sRGB values [0,1].

    Inverse of srgb_to_linear. Input is clamped to [0,1] first.
    """
    linear = np.clip(np.asarray(linear, dtype=np.float64), 0.0, 1.0)
    srgb = np.where(
        linear <= 0.0031308,
        linear * 12.92,
        1.055 * np.power(linear, 1.0 / 2.4) - 0.055
    )
    return np.clip(srgb, 0.0, 1.0)


def decode(pixels: NDArray[np.uint8]) -> NDArray[np.float64]:
    """
    Convert uint8 sRGB pixels [0,255] to linear RGB [0,1].

    Args:
        pixels: Array of shape (..., 3) with uint8 sRGB values

    Returns:
        Array of shape (..., 3) with linear RGB values
    """
    srgb_float = np.asarray(pixels).astype(np.float64) / 255.0
    return srgb_to_linear(srgb_float)


def encode(linear: NDArray[np.float64]) -> NDArray[np.uint8]:
    """
    Convert linear RGB to uint8 sRGB pixels.

    Each channel is clamped to [0,1], gamma-encoded, scaled by 255 and
    rounded to the nearest integer with ties rounding up.
    """
    srgb = linear_to_srgb(linear)
    # np.round rounds half to even; floor(x + 0.5) rounds half up
    return np.floor(srgb * 255.0 + 0.5).astype(np.uint8)


def to_hex(srgb8) -> str:
    """
    Format an 8-bit RGB triple as an uppercase hex string.

    Returns:
        Hex string like "#3941C8"
    """
    r, g, b = (int(v) for v in srgb8)
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_srgb8(hex_color: str) -> tuple[int, int, int]:
    """
    Parse a hex color string into an 8-bit RGB triple.

    Args:
        hex_color: Hex string like "#3941C8" or "3941C8"
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Expected 6 hex digits, got {hex_color!r}")

    r = int(hex_color[0:2], 16)
    g = int(hex_color[2:4], 16)
    b = int(hex_color[4:6], 16)
    return r, g, b


# =============================================================================
# Photometric helpers
# =============================================================================


def luma(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """Relative luminance of linear RGB, shape (...,)."""
    return np.asarray(linear, dtype=np.float64) @ _LUMA_WEIGHTS


def chroma(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """Channel spread (max - min) of linear RGB, shape (...,)."""
    linear = np.asarray(linear, dtype=np.float64)
    return linear.max(axis=-1) - linear.min(axis=-1)


# =============================================================================
# Linear RGB → XYZ → Lab
# =============================================================================

# Linear sRGB (D65) to CIE XYZ
_SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

# Bradford cone response matrix
_BRADFORD = np.array([
    [0.8951, 0.2664, -0.1614],
    [-0.7502, 1.7135, 0.0367],
    [0.0389, -0.0685, 1.0296],
], dtype=np.float64)

_BRADFORD_INV = np.linalg.inv(_BRADFORD)

_LAB_DELTA = 6.0 / 29.0


def linear_srgb_to_xyz(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert linear sRGB to CIE XYZ relative to D65.

    Args:
        linear: Array of shape (..., 3) with linear RGB values

    Returns:
        Array of shape (..., 3) with XYZ values (Y = 1.0 for white)
    """
    linear = np.asarray(linear, dtype=np.float64)
    return np.einsum('...j,ij->...i', linear, _SRGB_TO_XYZ)


def bradford_adapt(
    xyz: NDArray[np.float64],
    source_white: NDArray[np.float64] = D65_WHITE,
    target_white: NDArray[np.float64] = D50_WHITE,
) -> NDArray[np.float64]:
    """
    Chromatically adapt XYZ values from one white point to another.

    XYZ is moved into the Bradford cone response domain, each response is
    scaled by target/source white response, and the result is moved back.

    Args:
        xyz: Array of shape (..., 3) with XYZ values under source_white
        source_white: XYZ of the source illuminant (default: D65)
        target_white: XYZ of the target illuminant (default: D50)

    Returns:
        Array of shape (..., 3) with XYZ values under target_white
    """
    xyz = np.asarray(xyz, dtype=np.float64)

    source_cone = _BRADFORD @ np.asarray(source_white, dtype=np.float64)
    target_cone = _BRADFORD @ np.asarray(target_white, dtype=np.float64)
    scale = target_cone / source_cone

    cone = np.einsum('...j,ij->...i', xyz, _BRADFORD)
    return np.einsum('...j,ij->...i', cone * scale, _BRADFORD_INV)


def _lab_f(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """CIE Lab companding function."""
    return np.where(
        t > _LAB_DELTA ** 3,
        np.cbrt(t),
        t / (3.0 * _LAB_DELTA ** 2) + 4.0 / 29.0,
    )


def xyz_to_lab(
    xyz: NDArray[np.float64],
    white: NDArray[np.float64] = D50_WHITE,
) -> NDArray[np.float64]:
    """
    Convert CIE XYZ to CIE Lab.

    Args:
        xyz: Array of shape (..., 3) with XYZ values
        white: Reference white XYZ (default: D50)

    Returns:
        Array of shape (..., 3) with Lab values (L in [0, 100])
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    f = _lab_f(xyz / np.asarray(white, dtype=np.float64))

    fx = f[..., 0]
    fy = f[..., 1]
    fz = f[..., 2]

    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)

    return np.stack([L, a, b], axis=-1)


def to_lab_d50(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert linear sRGB to CIE Lab under D50.

    Full chain: Linear RGB → XYZ (D65) → Bradford → XYZ (D50) → Lab

    Args:
        linear: Array of shape (..., 3) with linear RGB values [0, 1]

    Returns:
        Array of shape (..., 3) with Lab values
    """
    xyz_d65 = linear_srgb_to_xyz(linear)
    xyz_d50 = bradford_adapt(xyz_d65, D65_WHITE, D50_WHITE)
    return xyz_to_lab(xyz_d50, D50_WHITE)
