# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Schema definitions for color measurements.

All types in this module are immutable (frozen dataclasses).
Once a measurement is produced, it is a value owned by the caller.
"""

from colorcheck.schema.sample_result import (
    LabColor,
    MeasurementFailure,
    SampleResult,
)

__all__ = [
    "LabColor",
    "SampleResult",
    "MeasurementFailure",
]
