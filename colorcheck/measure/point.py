# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Point sampling.

Measures a square window around a tapped image coordinate. The tapped
pixel itself is the outlier reference, so a window straddling an edge
reports the side that was tapped.
"""

from __future__ import annotations

import logging
import math

from colorcheck.schema import SampleResult
from colorcheck.measure.aggregate import (
    POINT_POLICY,
    SamplingPolicy,
    aggregate,
    clipped_mask,
    finalize,
    photometric_weights,
    reference_color,
)
from colorcheck.measure.calibration import (
    Calibration,
    CalibrationKind,
    CalibrationLike,
    as_snapshot,
)
from colorcheck.measure.colorspace import decode
from colorcheck.measure.source import SourceLike, as_source

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 23
CALIBRATION_WINDOW = 19

# Quality reported when the window had no usable weight
FALLBACK_QUALITY = 0.75


def _clamp(v: int, lo: int, hi: int) -> int:
    return min(max(v, lo), hi)


def window_bounds(
    x: float,
    y: float,
    window_size: int,
    width: int,
    height: int,
) -> tuple[int, int, int, int, int, int]:
    """
    Locate the tapped pixel and its window.

    Returns:
        (px, py, x0, y0, x1, y1) with the window spanning x0..x1 and
        y0..y1 inclusive, clipped to the image.
    """
    px = _clamp(int(math.floor(x + 0.5)), 0, width - 1)
    py = _clamp(int(math.floor(y + 0.5)), 0, height - 1)

    size = max(1, int(window_size))
    before = (size - 1) // 2
    after = size - 1 - before

    x0 = _clamp(px - before, 0, width - 1)
    x1 = _clamp(px + after, 0, width - 1)
    y0 = _clamp(py - before, 0, height - 1)
    y1 = _clamp(py + after, 0, height - 1)
    return px, py, x0, y0, x1, y1


def measure_at(
    source: SourceLike,
    x: float,
    y: float,
    window_size: int = DEFAULT_WINDOW,
    calibration: CalibrationLike = None,
    *,
    policy: SamplingPolicy = POINT_POLICY,
) -> SampleResult:
    """
    Measure the surface color around an image coordinate.

    Never fails: out-of-range coordinates and window sizes are clamped,
    and a window whose samples all carry zero weight falls back to the
    raw tapped pixel.

    Args:
        source: PixelSource or (H, W, 3) uint8 array
        x, y: Image-space coordinate (rounded to the nearest pixel)
        window_size: Side of the square window in pixels (default: 23)
        calibration: Calibration or snapshot; read once, never modified
        policy: Weighting rules (default: POINT_POLICY)

    Returns:
        SampleResult with note "ok", "highlights", "mixed area" or
        "fallback"

    Example:
        >>> r = measure_at(pixels, 120.0, 80.0)
        >>> r.hex, r.note
        ('#8A6F4E', 'ok')
    """
    src = as_source(source)
    snapshot = as_snapshot(calibration)

    px, py, x0, y0, x1, y1 = window_bounds(x, y, window_size, src.width, src.height)

    window = src.read_rect(x0, y0, x1 - x0 + 1, y1 - y0 + 1).reshape(-1, 3)
    center = decode(src.read_rect(px, py, 1, 1).reshape(3))
    linear = decode(window)

    clipped_fraction = float(clipped_mask(window).sum()) / len(window)
    weights = photometric_weights(linear, 1.0, policy)

    result = aggregate(
        linear,
        weights,
        reference_color(linear, policy, center=center),
        clipped_fraction,
        policy,
        snapshot,
    )
    if result is None:
        logger.debug("zero weight in window at (%d, %d); using center pixel", px, py)
        return finalize(center, FALLBACK_QUALITY, "fallback")

    return finalize(result.linear, result.quality, result.note)


def calibrate_at(
    source: SourceLike,
    x: float,
    y: float,
    kind: CalibrationKind,
    calibration: Calibration,
    window_size: int = CALIBRATION_WINDOW,
) -> SampleResult:
    """
    Measure a reference patch and store it as the point for kind.

    The patch is measured uncalibrated so earlier points do not skew the
    new one.

    Returns:
        The uncalibrated measurement that was stored
    """
    result = measure_at(source, x, y, window_size, calibration=None)
    calibration.add(kind, result.linear_rgb)
    return result
