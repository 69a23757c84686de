# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""Tests for pixel source adapters."""

import numpy as np
import pytest
from PIL import Image

from colorcheck import measure_at, measure_in_region, SampleResult
from colorcheck.measure.source import ArrayPixelSource, PixelSource, as_source


class _CountingSource:
    """Duck-typed PixelSource that records reads."""

    def __init__(self, pixels):
        self._pixels = pixels
        self.reads = []

    @property
    def width(self):
        return self._pixels.shape[1]

    @property
    def height(self):
        return self._pixels.shape[0]

    def read_rect(self, x, y, width, height):
        self.reads.append((x, y, width, height))
        return self._pixels[y:y + height, x:x + width].copy()


class TestArrayPixelSource:

    def test_dimensions(self):
        src = ArrayPixelSource(np.zeros((20, 30, 3), dtype=np.uint8))
        assert (src.width, src.height) == (30, 20)

    def test_read_rect(self):
        pixels = np.arange(20 * 30 * 3, dtype=np.uint32).reshape(20, 30, 3).astype(np.uint8)
        src = ArrayPixelSource(pixels)
        rect = src.read_rect(5, 2, 4, 3)
        assert rect.shape == (3, 4, 3)
        np.testing.assert_array_equal(rect, pixels[2:5, 5:9])

    def test_invalid_shape_raises(self):
        with pytest.raises(ValueError, match="Expected.*H, W, 3"):
            ArrayPixelSource(np.zeros((10, 10), dtype=np.uint8))

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Expected uint8"):
            ArrayPixelSource(np.zeros((10, 10, 3), dtype=np.float32))

    def test_invalid_type_raises(self):
        with pytest.raises(TypeError, match="numpy array"):
            ArrayPixelSource([[0, 0, 0]])

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="Empty"):
            ArrayPixelSource(np.zeros((0, 10, 3), dtype=np.uint8))

    def test_from_rgba_image(self):
        img = Image.new("RGBA", (12, 8), (10, 20, 30, 128))
        src = ArrayPixelSource.from_image(img)
        assert (src.width, src.height) == (12, 8)
        np.testing.assert_array_equal(src.read_rect(0, 0, 1, 1).reshape(3), [10, 20, 30])

    def test_satisfies_protocol(self):
        assert isinstance(ArrayPixelSource(np.zeros((2, 2, 3), dtype=np.uint8)), PixelSource)


class TestAsSource:

    def test_wraps_array(self):
        assert isinstance(as_source(np.zeros((4, 4, 3), dtype=np.uint8)), ArrayPixelSource)

    def test_passes_custom_source(self):
        src = _CountingSource(np.zeros((4, 4, 3), dtype=np.uint8))
        assert as_source(src) is src

    def test_rejects_other(self):
        with pytest.raises(TypeError, match="PixelSource"):
            as_source("image.png")


class TestCustomSource:

    def test_point_reads_window_and_center(self):
        src = _CountingSource(np.full((40, 40, 3), (70, 90, 110), dtype=np.uint8))
        result = measure_at(src, 20.0, 20.0, window_size=9)
        assert result.srgb8 == (70, 90, 110)
        assert (16, 16, 9, 9) in src.reads
        assert (20, 20, 1, 1) in src.reads

    def test_region_reads_bounding_box(self):
        src = _CountingSource(np.full((40, 40, 3), (70, 90, 110), dtype=np.uint8))
        result = measure_in_region(src, [(5, 5), (30, 5), (30, 25), (5, 25)])
        assert isinstance(result, SampleResult)
        assert src.reads == [(5, 5, 25, 20)]
