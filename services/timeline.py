"""
Time-window resolution: range token -> [start, end] interval -> timestamps.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import math

from schemas.portfolio import TimeRange
from services.networks.etherscan import TokenTransfer

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

ALL_RANGE_POINTS = 32
ALL_RANGE_MIN_LOOKBACK_MS = 30 * DAY_MS


@dataclass(frozen=True)
class RangeWindow:
    milliseconds: int
    points: int


@dataclass(frozen=True)
class Timeline:
    start: int
    end: int
    points: int


RANGE_WINDOWS: Dict[str, RangeWindow] = {
    "1H": RangeWindow(HOUR_MS, 16),
    "6H": RangeWindow(6 * HOUR_MS, 24),
    "1D": RangeWindow(DAY_MS, 24),
    "1W": RangeWindow(7 * DAY_MS, 28),
    "1M": RangeWindow(30 * DAY_MS, 30),
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_timeline(time_range: TimeRange, now_ms: int, transfers: Optional[Sequence[TokenTransfer]] = None) -> Timeline:
    """
    ALL reaches back to the oldest transfer, but never less than 30 days.
    `transfers` must be ascending; it is only consulted for ALL.
    """
    if time_range == "ALL":
        month_ago = now_ms - ALL_RANGE_MIN_LOOKBACK_MS
        start = min(transfers[0].timestamp, month_ago) if transfers else month_ago
        return Timeline(start=start, end=now_ms, points=ALL_RANGE_POINTS)

    window = RANGE_WINDOWS[time_range]
    return Timeline(start=now_ms - window.milliseconds, end=now_ms, points=window.points)


def build_timestamps(timeline: Timeline) -> List[int]:
    if timeline.points <= 1:
        return [timeline.end]

    step = (timeline.end - timeline.start) / (timeline.points - 1)
    return [_round_half_up(timeline.start + step * i) for i in range(timeline.points)]
