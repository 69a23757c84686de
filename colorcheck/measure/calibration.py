# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Reference-patch calibration.

The user names up to three measured patches as White, Gray or Black.
Each channel then gets a piecewise-linear curve through the
(measured, target) anchors, which remaps later measurements.

A CalibrationSnapshot is an immutable value. Calibration is the mutable
session holder: every edit swaps in a new snapshot under a lock, and
sampling reads one snapshot per call.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Union

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class CalibrationKind(Enum):
    """Reference patch kinds."""
    WHITE = "white"
    GRAY = "gray"
    BLACK = "black"

    @property
    def target(self) -> float:
        """Linear intensity the patch should map to."""
        return _TARGETS[self]


_TARGETS = {
    CalibrationKind.BLACK: 0.0,
    CalibrationKind.GRAY: 0.18,
    CalibrationKind.WHITE: 1.0,
}


@dataclass(frozen=True, slots=True)
class CalibrationPoint:
    """
    A measured reference patch.

    Attributes:
        kind: Which reference the patch represents
        measured: Linear RGB measured for the patch, clamped to [0, 1]
    """
    kind: CalibrationKind
    measured: tuple[float, float, float]

    def __post_init__(self) -> None:
        values = tuple(float(v) for v in self.measured)
        if len(values) != 3:
            raise ValueError(f"Expected 3 channels, got {len(values)}")
        clamped = tuple(min(max(v, 0.0), 1.0) for v in values)
        object.__setattr__(self, "measured", clamped)

    @property
    def target(self) -> float:
        return self.kind.target


Anchor = tuple[float, float]


def _map_channel(x: float, anchors: list[Anchor]) -> float:
    """Evaluate a piecewise-linear curve at x."""
    x = min(max(x, 0.0), 1.0)
    for (x0, y0), (x1, y1) in zip(anchors, anchors[1:]):
        if x <= x1:
            t = 0.0 if x1 == x0 else (x - x0) / (x1 - x0)
            return min(max(y0 + t * (y1 - y0), 0.0), 1.0)
    return min(max(anchors[-1][1], 0.0), 1.0)


@dataclass(frozen=True)
class CalibrationSnapshot:
    """
    Immutable calibration state.

    Holds at most one point per kind, in insertion order. Non-monotone
    data (e.g. a "white" patch darker than the "gray" one) is accepted
    as-is and produces whatever curve its anchors describe.
    """
    points: tuple[CalibrationPoint, ...] = ()

    @property
    def ready(self) -> bool:
        """True once at least two distinct kinds are stored."""
        return len({p.kind for p in self.points}) >= 2

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[CalibrationPoint]:
        return iter(self.points)

    def get(self, kind: CalibrationKind) -> Optional[CalibrationPoint]:
        """Return the stored point for a kind, if any."""
        for p in self.points:
            if p.kind is kind:
                return p
        return None

    def with_point(self, point: CalibrationPoint) -> CalibrationSnapshot:
        """Return a new snapshot with point replacing any point of its kind."""
        kept = tuple(p for p in self.points if p.kind is not point.kind)
        return CalibrationSnapshot(points=kept + (point,))

    def anchors(self, channel: int) -> list[Anchor]:
        """
        Build the sorted (measured, target) anchors for one channel.

        Endpoints (0, 0) and (1, 1) are synthesized when no stored point
        targets them, so the curve covers the whole [0, 1] domain.
        """
        anchors = [(p.measured[channel], p.target) for p in self.points]
        if not any(y == 0.0 for _, y in anchors):
            anchors.append((0.0, 0.0))
        if not any(y == 1.0 for _, y in anchors):
            anchors.append((1.0, 1.0))
        return sorted(anchors, key=lambda a: a[0])

    def apply(self, linear: NDArray[np.float64]) -> NDArray[np.float64]:
        """
        Remap a linear RGB triple through the per-channel curves.

        Identity when the calibration is not ready.
        """
        linear = np.asarray(linear, dtype=np.float64)
        if not self.ready:
            return linear
        return np.array(
            [_map_channel(float(linear[c]), self.anchors(c)) for c in range(3)],
            dtype=np.float64,
        )


EMPTY_CALIBRATION = CalibrationSnapshot()


class Calibration:
    """
    Session calibration, safe to edit while other threads sample.

    Writers replace the whole snapshot under a lock; readers take the
    current snapshot with snapshot() and never see a partial update.

    Example:
        >>> cal = Calibration()
        >>> cal.add(CalibrationKind.WHITE, (0.82, 0.80, 0.75))
        >>> cal.add(CalibrationKind.BLACK, (0.02, 0.02, 0.03))
        >>> cal.ready()
        True
    """

    def __init__(self, snapshot: CalibrationSnapshot = EMPTY_CALIBRATION) -> None:
        self._lock = threading.Lock()
        self._snapshot = snapshot

    def add(self, kind: CalibrationKind, measured) -> CalibrationPoint:
        """Store a measured patch for kind, replacing any earlier one."""
        point = CalibrationPoint(kind=kind, measured=tuple(measured))
        self.add_point(point)
        return point

    def add_point(self, point: CalibrationPoint) -> None:
        """Store a point, replacing any earlier point of the same kind."""
        with self._lock:
            self._snapshot = self._snapshot.with_point(point)
            ready = self._snapshot.ready
        logger.debug("calibration point %s = %s (ready=%s)", point.kind.value, point.measured, ready)

    def clear(self) -> None:
        """Remove all points."""
        with self._lock:
            self._snapshot = EMPTY_CALIBRATION
        logger.debug("calibration cleared")

    def replace(self, snapshot: CalibrationSnapshot) -> None:
        """Swap in a whole new state."""
        with self._lock:
            self._snapshot = snapshot

    def snapshot(self) -> CalibrationSnapshot:
        """Current immutable state."""
        with self._lock:
            return self._snapshot

    def ready(self) -> bool:
        return self.snapshot().ready

    @property
    def points(self) -> tuple[CalibrationPoint, ...]:
        return self.snapshot().points

    def apply(self, linear: NDArray[np.float64]) -> NDArray[np.float64]:
        return self.snapshot().apply(linear)

    def __len__(self) -> int:
        return len(self.snapshot())


CalibrationLike = Union[Calibration, CalibrationSnapshot, None]


def as_snapshot(calibration: CalibrationLike) -> CalibrationSnapshot:
    """Resolve whatever the caller passed into one immutable snapshot."""
    if calibration is None:
        return EMPTY_CALIBRATION
    if isinstance(calibration, Calibration):
        return calibration.snapshot()
    if isinstance(calibration, CalibrationSnapshot):
        return calibration
    raise TypeError(
        f"Expected Calibration or CalibrationSnapshot, got {type(calibration)}"
    )
