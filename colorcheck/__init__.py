# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
ColorCheck -- Color-accurate surface measurement from photographs.

Measures the color of a tapped point or a lasso-selected region,
rejecting highlights, shadows and edge bleed, and optionally corrects
the result against White / Gray / Black reference patches.

Quick start::

    import numpy as np
    from colorcheck import Calibration, CalibrationKind, calibrate_at, measure_at

    cal = Calibration()
    calibrate_at(pixels, 40, 40, CalibrationKind.WHITE, cal)
    calibrate_at(pixels, 90, 40, CalibrationKind.BLACK, cal)

    r = measure_at(pixels, 200.0, 150.0, calibration=cal)
    r.hex        # "#8A6F4E"
    r.lab_d50    # LabColor(L=..., a=..., b=...)
    r.summary()  # One-line readout
"""

from __future__ import annotations

__version__ = "1.0.0"

from colorcheck.measure import (
    POINT_POLICY,
    REGION_POLICY,
    ArrayPixelSource,
    Calibration,
    CalibrationKind,
    CalibrationPoint,
    CalibrationSnapshot,
    PixelSource,
    SamplingPolicy,
    calibrate_at,
    measure_at,
    measure_in_region,
)
from colorcheck.schema import (
    LabColor,
    MeasurementFailure,
    SampleResult,
)

__all__ = [
    # Core API
    "measure_at",
    "measure_in_region",
    "calibrate_at",
    # Calibration
    "Calibration",
    "CalibrationKind",
    "CalibrationPoint",
    "CalibrationSnapshot",
    # Results
    "SampleResult",
    "LabColor",
    "MeasurementFailure",
    # Inputs and tuning
    "PixelSource",
    "ArrayPixelSource",
    "SamplingPolicy",
    "POINT_POLICY",
    "REGION_POLICY",
    # Version
    "__version__",
]
