# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Measurement core for ColorCheck.

Point and region sampling over a pixel source, robust aggregation,
reference-patch calibration and colorimetric conversion.
All operations are synchronous and never modify their inputs.
"""

from colorcheck.measure.aggregate import (
    POINT_POLICY,
    REGION_POLICY,
    ReferenceStrategy,
    SamplingPolicy,
)
from colorcheck.measure.calibration import (
    Calibration,
    CalibrationKind,
    CalibrationPoint,
    CalibrationSnapshot,
)
from colorcheck.measure.point import calibrate_at, measure_at
from colorcheck.measure.region import measure_in_region
from colorcheck.measure.source import ArrayPixelSource, PixelSource

__all__ = [
    "measure_at",
    "measure_in_region",
    "calibrate_at",
    "Calibration",
    "CalibrationKind",
    "CalibrationPoint",
    "CalibrationSnapshot",
    "SamplingPolicy",
    "ReferenceStrategy",
    "POINT_POLICY",
    "REGION_POLICY",
    "PixelSource",
    "ArrayPixelSource",
]
