# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Region sampling.

Measures the pixels inside a freehand ("lasso") polygon. The polygon is
rasterized to a soft coverage mask so edge pixels count in proportion to
how much of them lies inside. Outliers are ranked against the
per-channel median, since a region has no single tapped pixel.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from colorcheck.schema import MeasurementFailure, SampleResult
from colorcheck.measure.aggregate import (
    REGION_POLICY,
    SamplingPolicy,
    aggregate,
    clipped_mask,
    finalize,
    photometric_weights,
    reference_color,
)
from colorcheck.measure.calibration import CalibrationLike, as_snapshot
from colorcheck.measure.colorspace import decode
from colorcheck.measure.source import SourceLike, as_source

logger = logging.getLogger(__name__)

# Sub-pixel grid used for antialiased coverage
SUPERSAMPLE = 4

# Coverage (0-255) below which a pixel is left out entirely (~3%)
MIN_COVERAGE = 8

# Fewer included pixels than this is not a measurable selection
MIN_PIXELS = 32

Point = tuple[float, float]


def polygon_bounds(
    polygon: Sequence[Point],
    width: int,
    height: int,
) -> tuple[int, int, int, int]:
    """
    Pixel bounding box of a polygon, clipped to the image.

    Returns:
        (x0, y0, x1, y1) with x1, y1 exclusive. Zero area when the
        polygon lies outside the image or is degenerate.
    """
    xs = [float(p[0]) for p in polygon]
    ys = [float(p[1]) for p in polygon]

    x0 = min(max(int(math.floor(min(xs))), 0), width)
    x1 = min(max(int(math.ceil(max(xs))), 0), width)
    y0 = min(max(int(math.floor(min(ys))), 0), height)
    y1 = min(max(int(math.ceil(max(ys))), 0), height)
    return x0, y0, x1, y1


def _inside_polygon(
    polygon: Sequence[Point],
    px: NDArray[np.float64],
    py: NDArray[np.float64],
) -> NDArray[np.bool_]:
    """
    Even-odd ray casting test for an array of points.

    Casts a ray in +x from each point and counts edge crossings; the
    polygon is closed implicitly from the last vertex back to the first.
    """
    inside = np.zeros(px.shape, dtype=bool)
    n = len(polygon)
    xj, yj = (float(v) for v in polygon[n - 1])
    for i in range(n):
        xi, yi = (float(v) for v in polygon[i])
        crosses = (yi > py) != (yj > py)
        if yj != yi:
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            inside ^= crosses & (px < x_cross)
        xj, yj = xi, yi
    return inside


def rasterize_polygon(
    polygon: Sequence[Point],
    bounds: tuple[int, int, int, int],
    supersample: int = SUPERSAMPLE,
) -> NDArray[np.uint8]:
    """
    Antialiased coverage of a polygon over a pixel box.

    Each pixel is split into supersample x supersample sub-pixels. A
    sub-pixel counts when its center lies inside the polygon, and the
    grid is box-filtered back down, so each value is the fraction of the
    pixel inside. Pixels wholly outside the polygon get exactly 0.

    Args:
        polygon: Vertices in image coordinates (pixel i spans [i, i+1))
        bounds: (x0, y0, x1, y1) box to rasterize, x1/y1 exclusive
        supersample: Sub-pixels per pixel along each axis

    Returns:
        (y1 - y0, x1 - x0) uint8 array, 0 = outside, 255 = fully inside
    """
    x0, y0, x1, y1 = bounds
    w, h = x1 - x0, y1 - y0
    if w <= 0 or h <= 0:
        return np.zeros((max(h, 0), max(w, 0)), dtype=np.uint8)

    # Sub-pixel centers in image coordinates
    offsets_x = x0 + (np.arange(w * supersample) + 0.5) / supersample
    offsets_y = y0 + (np.arange(h * supersample) + 0.5) / supersample
    px, py = np.meshgrid(offsets_x, offsets_y)

    inside = _inside_polygon(polygon, px, py)
    mask = Image.fromarray(inside.astype(np.uint8) * 255)

    coverage = mask.resize((w, h), Image.Resampling.BOX)
    return np.array(coverage, dtype=np.uint8)


def measure_in_region(
    source: SourceLike,
    polygon: Sequence[Point],
    calibration: CalibrationLike = None,
    *,
    policy: SamplingPolicy = REGION_POLICY,
) -> Union[SampleResult, MeasurementFailure]:
    """
    Measure the surface color inside a polygon.

    Args:
        source: PixelSource or (H, W, 3) uint8 array
        polygon: At least 3 image-space (x, y) vertices, implicitly closed
        calibration: Calibration or snapshot; read once, never modified
        policy: Weighting rules (default: REGION_POLICY)

    Returns:
        SampleResult with note "ok" or "textured", or a MeasurementFailure:
        - REGION_TOO_SMALL: fewer than 3 vertices, empty bounding box,
          or fewer than 32 covered pixels
        - DEGENERATE_AGGREGATE: all kept samples weighted to zero
    """
    if len(polygon) < 3:
        return MeasurementFailure.REGION_TOO_SMALL

    src = as_source(source)
    snapshot = as_snapshot(calibration)

    bounds = polygon_bounds(polygon, src.width, src.height)
    x0, y0, x1, y1 = bounds
    if x1 <= x0 or y1 <= y0:
        logger.debug("polygon bounding box is empty after clipping: %s", bounds)
        return MeasurementFailure.REGION_TOO_SMALL

    coverage = rasterize_polygon(polygon, bounds).reshape(-1)
    included = coverage >= MIN_COVERAGE
    count = int(included.sum())
    if count < MIN_PIXELS:
        logger.debug("region covers %d pixels, need %d", count, MIN_PIXELS)
        return MeasurementFailure.REGION_TOO_SMALL

    pixels = src.read_rect(x0, y0, x1 - x0, y1 - y0).reshape(-1, 3)[included]
    linear = decode(pixels)

    clipped_fraction = float(clipped_mask(pixels).sum()) / count
    weights = photometric_weights(linear, coverage[included] / 255.0, policy)

    result = aggregate(
        linear,
        weights,
        reference_color(linear, policy),
        clipped_fraction,
        policy,
        snapshot,
    )
    if result is None:
        logger.debug("region of %d pixels has zero total weight", count)
        return MeasurementFailure.DEGENERATE_AGGREGATE

    return finalize(result.linear, result.quality, result.note)
