"""Tests for millisecond <-> frame conversion."""

import pytest

from framelayout.timing import (
    DEFAULT_FPS,
    frame_duration_ms,
    frame_to_ms,
    ms_to_frame,
    ms_to_frame_ceil,
    ms_to_frame_floor,
)


class TestMsToFrame:
    def test_whole_seconds(self):
        assert ms_to_frame(1000, 30) == 30.0

    def test_fractional(self):
        assert ms_to_frame(50, 30) == pytest.approx(1.5)

    def test_none_ms_is_zero(self):
        assert ms_to_frame(None, 30) == 0


class TestRounding:
    def test_floor_absorbs_drift_below_boundary(self):
        # 33.33333333ms is one 30fps frame minus float noise.
        assert ms_to_frame_floor(33.33333333, 30) == 1

    def test_floor_inside_frame(self):
        assert ms_to_frame_floor(50, 30) == 1

    def test_ceil_absorbs_drift_above_boundary(self):
        assert ms_to_frame_ceil(1000.00001, 30) == 30

    def test_ceil_partial_frame_rounds_up(self):
        assert ms_to_frame_ceil(1010, 30) == 31

    def test_exact_boundary_is_stable(self):
        assert ms_to_frame_floor(1000, 30) == 30
        assert ms_to_frame_ceil(1000, 30) == 30


class TestFrameToMs:
    def test_round_trip_at_30fps(self):
        assert frame_to_ms(30, 30) == 1000.0

    def test_frame_duration(self):
        assert frame_duration_ms(60) == pytest.approx(16.6667, rel=1e-4)


class TestFpsFallback:
    def test_zero_fps_uses_default(self):
        assert ms_to_frame(1000, 0) == float(DEFAULT_FPS)

    def test_negative_fps_uses_default(self):
        assert frame_to_ms(30, -5) == 1000.0

    def test_none_fps_uses_default(self):
        assert frame_duration_ms(None) == pytest.approx(1000 / DEFAULT_FPS)
