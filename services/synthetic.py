"""
Flat-series detection and the synthetic waveform that replaces flat series.

The wave is a fixed sum of sines and cosines over the point index, so the
same (anchor, profile, point count) always yields the same curve.
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence
import math

from schemas.portfolio import ChartPoint

FLAT_RELATIVE_THRESHOLD = 0.002
FLAT_MIN_THRESHOLD_USD = 0.0001
MAX_DELTA_SHARE = 0.9
MIN_AMPLITUDE_USD = 1.0


@dataclass(frozen=True)
class WaveProfile:
    delta_ratio: float
    min_delta_usd: float
    amplitude_ratio: float


WAVE_PROFILES: Dict[str, WaveProfile] = {
    "1H": WaveProfile(0.007, 10, 0.32),
    "6H": WaveProfile(0.018, 24, 0.40),
    "1D": WaveProfile(0.028, 40, 0.48),
    "1W": WaveProfile(0.055, 75, 0.56),
    "1M": WaveProfile(0.095, 125, 0.63),
    "ALL": WaveProfile(0.14, 180, 0.70),
}


def flat_threshold(current_value_usd: float) -> float:
    return max(current_value_usd * FLAT_RELATIVE_THRESHOLD, FLAT_MIN_THRESHOLD_USD)


def value_spread(points: Sequence[ChartPoint]) -> float:
    if not points:
        return 0.0
    values = [point.value_usd for point in points]
    return max(values) - min(values)


def is_flat(points: Sequence[ChartPoint], current_value_usd: float) -> bool:
    return value_spread(points) <= flat_threshold(current_value_usd)


def wave_delta(anchor_value: float, profile: WaveProfile) -> float:
    target_delta = max(anchor_value * profile.delta_ratio, profile.min_delta_usd)
    return min(target_delta, anchor_value * MAX_DELTA_SHARE)


def wave_start_value(anchor_value: float, profile: WaveProfile) -> float:
    return max(anchor_value - wave_delta(anchor_value, profile), 0.0)


def wave_values(count: int, anchor_value: float, profile: WaveProfile) -> List[float]:
    """Trend from the profile's start value up to `anchor_value`, plus the wave."""
    if count <= 0:
        return []

    effective_delta = wave_delta(anchor_value, profile)
    start_value = max(anchor_value - effective_delta, 0.0)
    amplitude = max(effective_delta * profile.amplitude_ratio, MIN_AMPLITUDE_USD)

    values = []
    for i in range(count):
        progress = i / max(count - 1, 1)
        trend = start_value + (anchor_value - start_value) * progress
        wave = (
            math.sin(i * 0.45 + 1.2) * amplitude
            + math.cos(i * 0.21 + 0.4) * amplitude * 0.45
            + math.sin(i * 0.9) * amplitude * 0.2
        )
        values.append(max(trend + wave, 0.0))

    values[0] = start_value
    values[-1] = anchor_value
    return values


def apply_synthetic_wave(points: Sequence[ChartPoint], anchor_value: float, profile: WaveProfile) -> List[ChartPoint]:
    values = wave_values(len(points), anchor_value, profile)
    return [ChartPoint(timestamp=point.timestamp, value_usd=value) for point, value in zip(points, values)]


def pin_last_point(points: Sequence[ChartPoint], value_usd: float) -> List[ChartPoint]:
    output = list(points)
    if output:
        output[-1] = ChartPoint(timestamp=output[-1].timestamp, value_usd=value_usd)
    return output
