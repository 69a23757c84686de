# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
SampleResult -- the value returned by every measurement.

Design principles:
- Immutable: All types are frozen dataclasses
- Self-consistent: srgb8 and hex always encode linear_rgb
- Serializable: JSON-ready via to_dict / to_json

CIE Lab (D50):
- L (Lightness): 0 = black, 100 = white
- a: green (-) to red (+)
- b: blue (-) to yellow (+)
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum


_HEX_RE = re.compile(r"^#[0-9A-F]{6}$")


# =============================================================================
# Failure kinds
# =============================================================================


class MeasurementFailure(Enum):
    """
    Why a region measurement produced no result.

    These are ordinary outcomes of a degenerate selection, returned as
    values rather than raised.
    """
    REGION_TOO_SMALL = "region_too_small"
    DEGENERATE_AGGREGATE = "degenerate_aggregate"

    @property
    def message(self) -> str:
        """Short human-readable explanation."""
        return {
            MeasurementFailure.REGION_TOO_SMALL: "selection too small",
            MeasurementFailure.DEGENERATE_AGGREGATE: "no usable pixels in selection",
        }[self]


# =============================================================================
# Color values
# =============================================================================


@dataclass(frozen=True, slots=True)
class LabColor:
    """
    A color in CIE Lab, referenced to the D50 white point.

    Attributes:
        L: Lightness (0 = black, 100 = white)
        a: Green-red axis
        b: Blue-yellow axis
    """
    L: float
    a: float
    b: float

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"L": self.L, "a": self.a, "b": self.b}

    @classmethod
    def from_dict(cls, data: dict) -> LabColor:
        """Deserialize from dictionary."""
        return cls(L=data["L"], a=data["a"], b=data["b"])

    def __iter__(self):
        return iter((self.L, self.a, self.b))


@dataclass(frozen=True, slots=True)
class SampleResult:
    """
    A single color measurement.

    Attributes:
        linear_rgb: Measured color in linear light, each channel in [0, 1]
        srgb8: 8-bit sRGB encoding of linear_rgb
        hex: Uppercase "#RRGGBB" form of srgb8
        lab_d50: CIE Lab (D50) of linear_rgb
        quality: Confidence score in [0, 1]; 1.0 means a clean, uniform patch
        note: Short diagnostic tag ("ok", "highlights", "mixed area",
            "textured", "fallback")
    """
    linear_rgb: tuple[float, float, float]
    srgb8: tuple[int, int, int]
    hex: str
    lab_d50: LabColor
    quality: float
    note: str

    def __post_init__(self) -> None:
        """Validate field ranges, formats and that the encodings agree."""
        if len(self.linear_rgb) != 3 or len(self.srgb8) != 3:
            raise ValueError("linear_rgb and srgb8 must have 3 channels")
        if any(not 0.0 <= v <= 1.0 for v in self.linear_rgb):
            raise ValueError(f"Linear channels must be 0-1, got {self.linear_rgb}")
        if any(not 0 <= v <= 255 for v in self.srgb8):
            raise ValueError(f"sRGB channels must be 0-255, got {self.srgb8}")
        if not _HEX_RE.match(self.hex):
            raise ValueError(f"Hex must be '#RRGGBB' uppercase, got {self.hex!r}")
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"Quality must be 0-1, got {self.quality}")

        from colorcheck.measure.colorspace import encode, hex_to_srgb8

        srgb8 = tuple(int(v) for v in self.srgb8)
        if hex_to_srgb8(self.hex) != srgb8:
            raise ValueError(f"Hex {self.hex} does not encode srgb8 {srgb8}")
        encoded = tuple(int(v) for v in encode(self.linear_rgb))
        if encoded != srgb8:
            raise ValueError(
                f"srgb8 {srgb8} does not encode linear_rgb {self.linear_rgb} (expected {encoded})"
            )

    @property
    def quality_pct(self) -> int:
        """Quality as a whole percentage."""
        return int(self.quality * 100.0 + 0.5)

    def summary(self) -> str:
        """
        One-line human-readable readout.

        Example:
            #7F7F7F  RGB(127,127,127)  Lab D50 (53.4, 0.0, 0.0)  Q 100%  ok
        """
        r, g, b = self.srgb8
        lab = self.lab_d50
        return (
            f"{self.hex}  RGB({r},{g},{b})  "
            f"Lab D50 ({lab.L:.1f}, {lab.a:.1f}, {lab.b:.1f})  "
            f"Q {self.quality_pct}%  {self.note}"
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "linear_rgb": list(self.linear_rgb),
            "srgb8": list(self.srgb8),
            "hex": self.hex,
            "lab_d50": self.lab_d50.to_dict(),
            "quality": self.quality,
            "note": self.note,
        }

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> SampleResult:
        """Deserialize from dictionary."""
        return cls(
            linear_rgb=tuple(float(v) for v in data["linear_rgb"]),
            srgb8=tuple(int(v) for v in data["srgb8"]),
            hex=data["hex"],
            lab_d50=LabColor.from_dict(data["lab_d50"]),
            quality=float(data["quality"]),
            note=data["note"],
        )
