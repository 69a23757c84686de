# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Robust aggregation of pixel samples.

Shared by point and region sampling:

1. Photometric weighting: near-neutral highlights and deep shadows are
   downweighted (they carry lighting, not surface color)
2. Outlier rejection: samples are ranked by distance to a reference
   color and only the nearest fraction is kept (boundary bleed)
3. Weighted mean of the kept samples, optionally calibrated
4. Quality score from the spread of kept samples and the share of
   clipped pixels

The two samplers differ only in their SamplingPolicy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from colorcheck.schema import LabColor, SampleResult
from colorcheck.measure.calibration import CalibrationSnapshot
from colorcheck.measure.colorspace import chroma, encode, luma, to_hex, to_lab_d50


# Weight sums below this are treated as zero
WEIGHT_EPSILON = 1e-9

# 8-bit level at or above which a channel counts as clipped
CLIP_LEVEL = 254


class ReferenceStrategy(Enum):
    """Color that outliers are measured against."""
    CENTER_PIXEL = "center_pixel"
    CHANNEL_MEDIAN = "channel_median"


@dataclass(frozen=True)
class SamplingPolicy:
    """Weighting, trimming and scoring rules for one sampling mode."""

    # Near-neutral highlight: luma > highlight_luma and chroma < highlight_chroma
    highlight_luma: float = 0.80
    highlight_chroma: float = 0.08
    highlight_factor: float = 0.20

    # Near-specular, applied on top of the highlight factor (1.0 = off)
    specular_luma: float = 0.92
    specular_chroma: float = 0.05
    specular_factor: float = 1.0

    # Shadows: luma < shadow_luma, then deep shadows on top (1.0 = off)
    shadow_luma: float = 0.06
    shadow_factor: float = 0.60
    deep_shadow_luma: float = 0.03
    deep_shadow_factor: float = 1.0

    # Outlier rejection: keep max(min_keep, round(keep_fraction * N)) nearest
    reference: ReferenceStrategy = ReferenceStrategy.CENTER_PIXEL
    keep_fraction: float = 0.55
    min_keep: int = 16

    # Quality: spread over the nearest spread_samples kept samples
    spread_samples: int = 32
    spread_scale: float = 0.25
    min_clip_factor: float = 0.4

    # Notes. clipped_note_fraction=None never reports "highlights"
    clipped_note_fraction: Optional[float] = None
    spread_note_threshold: float = 0.18
    spread_note: str = "mixed area"


POINT_POLICY = SamplingPolicy(
    specular_factor=0.10,
    shadow_factor=0.60,
    deep_shadow_factor=0.35,
    reference=ReferenceStrategy.CENTER_PIXEL,
    keep_fraction=0.55,
    min_keep=16,
    spread_samples=32,
    clipped_note_fraction=0.2,
    spread_note_threshold=0.18,
    spread_note="mixed area",
)

# Milder on shadows: a lasso is drawn over a surface on purpose
REGION_POLICY = SamplingPolicy(
    specular_factor=1.0,
    shadow_factor=0.70,
    deep_shadow_factor=1.0,
    reference=ReferenceStrategy.CHANNEL_MEDIAN,
    keep_fraction=0.65,
    min_keep=64,
    spread_samples=128,
    clipped_note_fraction=None,
    spread_note_threshold=0.20,
    spread_note="textured",
)


@dataclass(frozen=True)
class Aggregate:
    """Outcome of one aggregation before formatting."""
    linear: NDArray[np.float64]
    spread: float
    quality: float
    note: str
    kept: int


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def keep_count(n: int, policy: SamplingPolicy) -> int:
    """Number of nearest samples retained out of n."""
    return max(policy.min_keep, _round_half_up(policy.keep_fraction * n))


def photometric_weights(
    linear: NDArray[np.float64],
    base: NDArray[np.float64] | float,
    policy: SamplingPolicy,
) -> NDArray[np.float64]:
    """
    Per-pixel sample weights.

    Args:
        linear: (N, 3) linear RGB samples
        base: Starting weight, 1.0 or a per-pixel coverage fraction
        policy: Weighting rules

    Returns:
        (N,) weights in [0, 1]
    """
    y = luma(linear)
    c = chroma(linear)

    weights = np.broadcast_to(np.asarray(base, dtype=np.float64), y.shape).copy()
    weights[(y > policy.highlight_luma) & (c < policy.highlight_chroma)] *= policy.highlight_factor
    weights[(y > policy.specular_luma) & (c < policy.specular_chroma)] *= policy.specular_factor
    weights[y < policy.shadow_luma] *= policy.shadow_factor
    weights[y < policy.deep_shadow_luma] *= policy.deep_shadow_factor
    return weights


def channel_median(linear: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Per-channel median, taking the upper middle element for even counts.

    Always a value actually present in each channel.
    """
    ordered = np.sort(np.asarray(linear, dtype=np.float64), axis=0)
    return ordered[len(ordered) // 2]


def clipped_mask(pixels: NDArray[np.uint8]) -> NDArray[np.bool_]:
    """True where all three 8-bit channels are saturated."""
    return np.all(np.asarray(pixels) >= CLIP_LEVEL, axis=-1)


def reference_color(
    linear: NDArray[np.float64],
    policy: SamplingPolicy,
    center: Optional[NDArray[np.float64]] = None,
) -> NDArray[np.float64]:
    """Resolve the outlier reference for a policy."""
    if policy.reference is ReferenceStrategy.CENTER_PIXEL:
        if center is None:
            raise ValueError("Center-pixel reference requires a center color")
        return np.asarray(center, dtype=np.float64)
    return channel_median(linear)


def _sq_dist(linear: NDArray[np.float64], color: NDArray[np.float64]) -> NDArray[np.float64]:
    delta = linear - color
    return np.sum(delta ** 2, axis=-1)


def _note(spread: float, clipped_fraction: float, policy: SamplingPolicy) -> str:
    if (
        policy.clipped_note_fraction is not None
        and clipped_fraction > policy.clipped_note_fraction
    ):
        return "highlights"
    if spread > policy.spread_note_threshold:
        return policy.spread_note
    return "ok"


def aggregate(
    linear: NDArray[np.float64],
    weights: NDArray[np.float64],
    reference: NDArray[np.float64],
    clipped_fraction: float,
    policy: SamplingPolicy,
    calibration: Optional[CalibrationSnapshot] = None,
) -> Optional[Aggregate]:
    """
    Trimmed, weighted mean of samples with a quality score.

    Args:
        linear: (N, 3) linear RGB samples
        weights: (N,) sample weights
        reference: Color that outliers are ranked against
        clipped_fraction: Share of sampled pixels that are fully clipped
        policy: Trimming and scoring rules
        calibration: Applied to the mean when ready, before scoring

    Returns:
        Aggregate, or None if the kept samples carry no weight.
    """
    linear = np.asarray(linear, dtype=np.float64).reshape(-1, 3)
    weights = np.asarray(weights, dtype=np.float64).reshape(-1)

    # Stable ordering so ties keep pixel order
    order = np.argsort(_sq_dist(linear, reference), kind="stable")
    kept_idx = order[:keep_count(len(order), policy)]
    kept = linear[kept_idx]
    kept_w = weights[kept_idx]

    total = float(np.sum(kept_w))
    if total < WEIGHT_EPSILON:
        return None

    mean = np.sum(kept * kept_w[:, np.newaxis], axis=0) / total
    if calibration is not None and calibration.ready:
        mean = calibration.apply(mean)

    # Raw samples against the final (calibrated) color
    spread = float(np.sqrt(np.mean(_sq_dist(kept[:policy.spread_samples], mean))))
    quality = (
        float(np.clip(1.0 - spread / policy.spread_scale, 0.0, 1.0))
        * float(np.clip(1.0 - clipped_fraction, policy.min_clip_factor, 1.0))
    )

    return Aggregate(
        linear=mean,
        spread=spread,
        quality=quality,
        note=_note(spread, clipped_fraction, policy),
        kept=len(kept_idx),
    )


def finalize(
    linear: NDArray[np.float64],
    quality: float,
    note: str,
) -> SampleResult:
    """
    Package a linear color as a SampleResult.

    The color is clamped to [0, 1] first so srgb8, hex and Lab all
    describe the same stored value.
    """
    clamped = np.clip(np.asarray(linear, dtype=np.float64), 0.0, 1.0)
    srgb8 = tuple(int(v) for v in encode(clamped))
    lab = to_lab_d50(clamped)

    return SampleResult(
        linear_rgb=tuple(float(v) for v in clamped),
        srgb8=srgb8,
        hex=to_hex(srgb8),
        lab_d50=LabColor(L=float(lab[0]), a=float(lab[1]), b=float(lab[2])),
        quality=min(max(float(quality), 0.0), 1.0),
        note=note,
    )
