"""
Fully synthetic dashboard used when no live wallet data is available.

Needs no configuration and no network access.
"""
from typing import Dict, List, Optional
import math
import time

from schemas.portfolio import ChartPoint, ChartSeries, DashboardData, TimeRange, WalletMetrics
from services.timeline import DAY_MS, HOUR_MS

FALLBACK_PUBLIC_KEY = "0x1111111111111111111111111111111111111111"
FALLBACK_TOKEN_ADDRESS = "0x2222222222222222222222222222222222222222"
MOCK_CURRENT_VALUE_USD = 3361.42
MIN_START_VALUE_USD = 1.0
MIN_AMPLITUDE_USD = 32.0
AMPLITUDE_RATIO = 0.42

RANGE_CHANGE_USD: Dict[str, float] = {
    "1H": 42.37,
    "6H": 223.43,
    "1D": 223.43,
    "1W": 488.62,
    "1M": 792.11,
    "ALL": 1249.85,
}

RANGE_DURATION_MS: Dict[str, int] = {
    "1H": HOUR_MS,
    "6H": 6 * HOUR_MS,
    "1D": DAY_MS,
    "1W": 7 * DAY_MS,
    "1M": 30 * DAY_MS,
    "ALL": 120 * DAY_MS,
}

RANGE_POINT_COUNT: Dict[str, int] = {
    "1H": 16,
    "6H": 24,
    "1D": 24,
    "1W": 30,
    "1M": 34,
    "ALL": 36,
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def build_fallback_chart(time_range: TimeRange, now_ms: Optional[int] = None) -> ChartSeries:
    now = _now_ms() if now_ms is None else now_ms
    duration = RANGE_DURATION_MS[time_range]
    count = RANGE_POINT_COUNT[time_range]
    step = duration / max(count - 1, 1)

    current_value_usd = MOCK_CURRENT_VALUE_USD
    change_target = RANGE_CHANGE_USD[time_range]
    start_value_usd = max(current_value_usd - change_target, MIN_START_VALUE_USD)
    amplitude = max(change_target * AMPLITUDE_RATIO, MIN_AMPLITUDE_USD)

    points: List[ChartPoint] = []
    for i in range(count):
        timestamp = int(math.floor(now - duration + i * step + 0.5))
        progress = i / max(count - 1, 1)
        trend = start_value_usd + (current_value_usd - start_value_usd) * progress
        wave = (
            math.sin(i * 0.38 + 0.9) * amplitude * 0.35
            + math.cos(i * 0.22) * amplitude * 0.2
            + math.sin(i * 0.77) * amplitude * 0.12
        )
        points.append(ChartPoint(timestamp=timestamp, value_usd=max(trend + wave, 0.0)))

    if points:
        points[0] = ChartPoint(timestamp=points[0].timestamp, value_usd=start_value_usd)
        points[-1] = ChartPoint(timestamp=points[-1].timestamp, value_usd=current_value_usd)

    change_usd = current_value_usd - start_value_usd
    return ChartSeries(
        range=time_range,
        points=points,
        start_value_usd=start_value_usd,
        current_value_usd=current_value_usd,
        change_usd=change_usd,
        change_percent=(change_usd / start_value_usd) * 100,
    )


def build_fallback_dashboard(
    time_range: TimeRange,
    wallet_name: Optional[str] = None,
    joined_at: Optional[str] = None,
    token_symbol: Optional[str] = None,
    token_address: Optional[str] = None,
    token_decimals: Optional[int] = None,
    public_key: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> DashboardData:
    """Mock wallet plus mock chart; any identity field may be overridden."""
    return DashboardData(
        metrics=WalletMetrics(
            wallet_name=wallet_name or "My Wallet",
            joined_at=joined_at or "2025-11-01",
            public_key=public_key or FALLBACK_PUBLIC_KEY,
            token_symbol=token_symbol or "USDC",
            token_address=token_address or FALLBACK_TOKEN_ADDRESS,
            token_decimals=token_decimals if token_decimals is not None else 6,
            balance=984.42,
            balance_usd=MOCK_CURRENT_VALUE_USD,
            portfolio_value_usd=MOCK_CURRENT_VALUE_USD,
            token_plus_portfolio_usd=0.01,
            pnl_today_usd=23.43,
            pnl_today_percent=5.2,
        ),
        chart=build_fallback_chart(time_range, now_ms=now_ms),
    )
