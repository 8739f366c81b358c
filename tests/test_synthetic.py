import pytest

from schemas.portfolio import ChartPoint
from services.synthetic import (
    WAVE_PROFILES,
    WaveProfile,
    apply_synthetic_wave,
    flat_threshold,
    is_flat,
    pin_last_point,
    wave_start_value,
    wave_values,
)


def _points(values, start=0, step=1000):
    return [ChartPoint(timestamp=start + i * step, value_usd=v) for i, v in enumerate(values)]


class TestFlatness:
    def test_threshold_scales_with_value(self):
        assert flat_threshold(1000.0) == pytest.approx(2.0)
        assert flat_threshold(0.0) == 0.0001

    def test_constant_series_is_flat(self):
        assert is_flat(_points([1000.0] * 10), 1000.0)

    def test_spread_at_threshold_is_flat(self):
        assert is_flat(_points([999.0, 1001.0]), 1000.0)

    def test_real_movement_is_not_flat(self):
        assert not is_flat(_points([800.0, 800.0, 1000.0]), 1000.0)

    def test_empty_series_is_flat(self):
        assert is_flat([], 10.0)


class TestWave:
    def test_month_profile_endpoints(self):
        values = wave_values(30, 1000.0, WAVE_PROFILES["1M"])
        # min_delta_usd (125) dominates 9.5% of 1000
        assert values[0] == 875.0
        assert values[-1] == 1000.0

    def test_ratio_driven_delta(self):
        profile = WaveProfile(delta_ratio=0.095, min_delta_usd=0, amplitude_ratio=0.63)
        values = wave_values(30, 1000.0, profile)
        assert values[0] == pytest.approx(905.0)
        assert values[-1] == 1000.0

    def test_delta_capped_at_ninety_percent_of_anchor(self):
        assert wave_start_value(5.0, WAVE_PROFILES["1H"]) == pytest.approx(0.5)

    def test_zero_anchor_stays_non_negative(self):
        values = wave_values(24, 0.0, WAVE_PROFILES["6H"])
        assert values[0] == 0.0
        assert values[-1] == 0.0
        assert all(v >= 0 for v in values)

    def test_deterministic(self):
        first = wave_values(28, 1234.5, WAVE_PROFILES["1W"])
        second = wave_values(28, 1234.5, WAVE_PROFILES["1W"])
        assert first == second

    def test_interior_is_not_flat(self):
        values = wave_values(24, 1000.0, WAVE_PROFILES["1D"])
        interior = values[1:-1]
        assert max(interior) - min(interior) > flat_threshold(1000.0)

    def test_single_point_is_anchor(self):
        assert wave_values(1, 42.0, WAVE_PROFILES["1D"]) == [42.0]

    def test_no_points(self):
        assert wave_values(0, 42.0, WAVE_PROFILES["1D"]) == []

    def test_apply_keeps_timestamps(self):
        points = _points([1000.0] * 16, start=5_000, step=225_000)
        waved = apply_synthetic_wave(points, 1000.0, WAVE_PROFILES["1H"])
        assert [p.timestamp for p in waved] == [p.timestamp for p in points]
        assert waved[-1].value_usd == 1000.0


def test_pin_last_point():
    points = _points([0.1, 0.1, 0.1])
    pinned = pin_last_point(points, 0.3)
    assert [p.value_usd for p in pinned] == [0.1, 0.1, 0.3]
    assert points[-1].value_usd == 0.1
    assert pin_last_point([], 5.0) == []
