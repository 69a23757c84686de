# Copyright (c) 2026 ColorCheck
# SPDX-License-Identifier: MIT

"""Tests for color space conversions (sRGB ↔ linear → XYZ → Lab D50)."""

import numpy as np
import pytest

from colorcheck.measure.colorspace import (
    D50_WHITE,
    D65_WHITE,
    bradford_adapt,
    chroma,
    decode,
    encode,
    hex_to_srgb8,
    linear_srgb_to_xyz,
    linear_to_srgb,
    luma,
    srgb_to_linear,
    to_hex,
    to_lab_d50,
    xyz_to_lab,
)


class TestSRGBLinearRoundtrip:
    """sRGB ↔ Linear RGB conversions must roundtrip accurately."""

    def test_roundtrip_mid_gray(self):
        srgb = np.array([0.5, 0.5, 0.5])
        recovered = linear_to_srgb(srgb_to_linear(srgb))
        np.testing.assert_allclose(recovered, srgb, atol=1e-10)

    def test_gamma_threshold(self):
        """Values at or below 0.04045 use the linear segment."""
        linear = srgb_to_linear(np.array([0.03]))
        assert float(linear[0]) == pytest.approx(0.03 / 12.92, abs=1e-12)

    def test_inverse_threshold(self):
        srgb = linear_to_srgb(np.array([0.002]))
        assert float(srgb[0]) == pytest.approx(0.002 * 12.92, abs=1e-12)

    def test_out_of_range_is_clamped(self):
        srgb = linear_to_srgb(np.array([-0.5, 1.5]))
        np.testing.assert_allclose(srgb, [0.0, 1.0])


class TestEightBit:

    def test_every_level_roundtrips_exactly(self):
        levels = np.arange(256, dtype=np.uint8)
        pixels = np.stack([levels, levels[::-1], levels], axis=-1)
        np.testing.assert_array_equal(encode(decode(pixels)), pixels)

    def test_decode_endpoints(self):
        np.testing.assert_allclose(decode(np.array([0, 255, 0], dtype=np.uint8)), [0.0, 1.0, 0.0])

    def test_encode_clamps(self):
        np.testing.assert_array_equal(encode(np.array([-0.2, 0.0, 3.0])), [0, 0, 255])

    def test_encode_dtype(self):
        assert encode(np.array([0.5, 0.5, 0.5])).dtype == np.uint8

    def test_encode_mid_linear(self):
        # 0.5 linear is ~0.7354 encoded, 187.5... rounds to 188
        assert int(encode(np.array([0.5, 0.5, 0.5]))[0]) == 188


class TestHex:

    def test_to_hex_uppercase(self):
        assert to_hex((171, 205, 239)) == "#ABCDEF"

    def test_to_hex_zero_padded(self):
        assert to_hex((0, 5, 16)) == "#000510"

    def test_hex_to_srgb8(self):
        assert hex_to_srgb8("#3941C8") == (0x39, 0x41, 0xC8)
        assert hex_to_srgb8("3941c8") == (0x39, 0x41, 0xC8)

    def test_hex_to_srgb8_rejects_short(self):
        with pytest.raises(ValueError, match="6 hex digits"):
            hex_to_srgb8("#FFF")


class TestPhotometric:

    def test_white_luma_is_one(self):
        assert float(luma(np.array([1.0, 1.0, 1.0]))) == pytest.approx(1.0)

    def test_green_dominates_luma(self):
        assert float(luma(np.array([0.0, 1.0, 0.0]))) == pytest.approx(0.7152)

    def test_chroma_is_channel_spread(self):
        assert float(chroma(np.array([0.2, 0.9, 0.5]))) == pytest.approx(0.7)

    def test_batch_shapes(self):
        batch = np.random.RandomState(7).random((10, 3))
        assert luma(batch).shape == (10,)
        assert chroma(batch).shape == (10,)


class TestChromaticAdaptation:

    def test_source_white_maps_to_target_white(self):
        np.testing.assert_allclose(bradford_adapt(D65_WHITE), D50_WHITE, atol=1e-9)

    def test_same_white_is_identity(self):
        xyz = np.array([0.3, 0.4, 0.5])
        np.testing.assert_allclose(bradford_adapt(xyz, D65_WHITE, D65_WHITE), xyz, atol=1e-12)

    def test_srgb_white_is_near_d65(self):
        xyz = linear_srgb_to_xyz(np.array([1.0, 1.0, 1.0]))
        np.testing.assert_allclose(xyz, D65_WHITE, atol=1e-3)


class TestLab:

    def test_white_is_l100(self):
        L, a, b = to_lab_d50(np.array([1.0, 1.0, 1.0]))
        assert L == pytest.approx(100.0, abs=0.5)
        assert a == pytest.approx(0.0, abs=0.5)
        assert b == pytest.approx(0.0, abs=0.5)

    def test_black_is_zero(self):
        L, a, b = to_lab_d50(np.array([0.0, 0.0, 0.0]))
        assert L == pytest.approx(0.0, abs=1e-9)
        assert a == pytest.approx(0.0, abs=1e-9)
        assert b == pytest.approx(0.0, abs=1e-9)

    def test_eighteen_percent_gray(self):
        L, a, b = to_lab_d50(np.array([0.18, 0.18, 0.18]))
        assert L == pytest.approx(49.5, abs=0.1)
        assert abs(a) < 0.5
        assert abs(b) < 0.5

    def test_srgb_red(self):
        L, a, b = to_lab_d50(np.array([1.0, 0.0, 0.0]))
        assert L == pytest.approx(54.29, abs=1.0)
        assert a == pytest.approx(80.80, abs=1.0)
        assert b == pytest.approx(69.89, abs=1.0)

    def test_linear_segment_below_threshold(self):
        """Tiny Y uses the linear branch, not the cube root."""
        lab = xyz_to_lab(np.array([0.0, 0.001, 0.0]))
        assert lab[0] == pytest.approx(116.0 * (0.001 / (3 * (6 / 29) ** 2)), abs=1e-9)

    def test_batch(self):
        batch = np.random.RandomState(3).random((5, 4, 3))
        assert to_lab_d50(batch).shape == (5, 4, 3)
