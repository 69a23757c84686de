# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""
Pixel sources.

The samplers read 8-bit RGB rectangles through a small read-only
interface. Decoding files and mapping screen coordinates is the
caller's job; a decoded image or array is wrapped here.
"""

from __future__ import annotations

from typing import Protocol, Union, runtime_checkable

import numpy as np
from numpy.typing import NDArray


@runtime_checkable
class PixelSource(Protocol):
    """Read-only access to an 8-bit RGB image."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def read_rect(self, x: int, y: int, width: int, height: int) -> NDArray[np.uint8]:
        """Return the (height, width, 3) uint8 rectangle at (x, y)."""
        ...


class ArrayPixelSource:
    """
    PixelSource over an (H, W, 3) uint8 NumPy array.

    The array is not copied; read_rect returns views into it.
    """

    def __init__(self, pixels: NDArray[np.uint8]) -> None:
        if not isinstance(pixels, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(pixels)}")

        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(
                f"Expected (H, W, 3) array, got shape {pixels.shape}"
            )

        if pixels.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 array, got {pixels.dtype}"
            )

        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"Empty image: shape {pixels.shape}")

        self._pixels = pixels

    @classmethod
    def from_image(cls, image) -> ArrayPixelSource:
        """
        Wrap an already-decoded PIL image.

        Non-RGB modes (RGBA, P, L, ...) are converted to RGB; alpha is
        dropped.
        """
        if image.mode != "RGB":
            image = image.convert("RGB")
        return cls(np.array(image, dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def read_rect(self, x: int, y: int, width: int, height: int) -> NDArray[np.uint8]:
        return self._pixels[y:y + height, x:x + width]


SourceLike = Union[PixelSource, NDArray[np.uint8]]


def as_source(source: SourceLike) -> PixelSource:
    """Accept a PixelSource or a raw uint8 array."""
    if isinstance(source, np.ndarray):
        return ArrayPixelSource(source)
    if isinstance(source, PixelSource):
        return source
    raise TypeError(
        f"Expected PixelSource or numpy array, got {type(source)}"
    )
