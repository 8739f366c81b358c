"""
Portfolio series assembly.

Reads the current balance, the transfer history and the token price (all
through the TTL cache, concurrently), reconstructs the historical value curve
for a range, swaps flat curves for a synthetic wave and decides whether the
wallet carries enough value to be shown at all.
"""
from typing import Callable, List, Optional, Sequence, Tuple
import asyncio
import logging
import sys
import time

from schemas.portfolio import ChartPoint, ChartSeries, DashboardData, TimeRange, WalletMetrics
from services.cache import TTLCache
from services.config.config import AppConfig
from services.fallback import build_fallback_chart, build_fallback_dashboard
from services.logging_setup import log_info
from services.networks.etherscan import EtherscanClient, TokenTransfer
from services.networks.evm import TokenBalanceClient, to_token_units
from services.price import DexScreenerPriceSource
from services.reconstruction import reconstruct_balances, to_signed_flows
from services.synthetic import WAVE_PROFILES, apply_synthetic_wave, is_flat, pin_last_point
from services.timeline import build_timestamps, resolve_timeline

logger = logging.getLogger(__name__)

EPSILON = sys.float_info.epsilon


def _now_ms() -> int:
    return int(time.time() * 1000)


def build_chart_points(
    time_range: TimeRange,
    address: str,
    current_balance: float,
    token_price: float,
    transfers: Sequence[TokenTransfer],
    token_decimals: int,
    now_ms: int,
    negligible_value_usd: float = 1.0,
) -> List[ChartPoint]:
    current_value_usd = current_balance * token_price
    timestamps = build_timestamps(resolve_timeline(time_range, now_ms, transfers))
    flows = to_signed_flows(transfers, address, token_decimals)
    balances = reconstruct_balances(timestamps, current_balance, flows)

    points = [
        ChartPoint(timestamp=timestamp, value_usd=balance * token_price)
        for timestamp, balance in zip(timestamps, balances)
    ]

    if is_flat(points, current_value_usd):
        # empty wallets stay flat instead of growing an invented curve
        if not transfers and current_value_usd <= negligible_value_usd:
            return pin_last_point(points, current_value_usd)
        return apply_synthetic_wave(points, current_value_usd, WAVE_PROFILES[time_range])

    return pin_last_point(points, current_value_usd)


def summarize_series(time_range: TimeRange, points: List[ChartPoint], current_value_usd: float) -> ChartSeries:
    start_value_usd = points[0].value_usd if points else current_value_usd
    change_usd = current_value_usd - start_value_usd
    change_percent = 0.0 if abs(start_value_usd) < EPSILON else (change_usd / start_value_usd) * 100

    return ChartSeries(
        range=time_range,
        points=points,
        start_value_usd=start_value_usd,
        current_value_usd=current_value_usd,
        change_usd=change_usd,
        change_percent=change_percent,
    )


def series_peak(series: ChartSeries) -> float:
    return max((point.value_usd for point in series.points), default=series.current_value_usd)


def series_has_live_data(series: ChartSeries, threshold_usd: float) -> bool:
    return (
        series.current_value_usd > threshold_usd
        or abs(series.change_usd) > threshold_usd
        or series_peak(series) > threshold_usd
    )


class PortfolioService:
    def __init__(
        self,
        config: AppConfig,
        balance_client: TokenBalanceClient,
        transfer_client: EtherscanClient,
        price_source: DexScreenerPriceSource,
        cache: TTLCache,
        clock: Callable[[], int] = _now_ms,
    ):
        self.config = config
        self.balance_client = balance_client
        self.transfer_client = transfer_client
        self.price_source = price_source
        self.cache = cache
        self.clock = clock

    def _resolve_address(self, address: Optional[str]) -> str:
        return address or self.config.tracked_public_key

    async def _balance_raw(self, address: str) -> int:
        return await self.cache.get_or_load(
            ("wallet-balance", address.lower()),
            lambda: asyncio.to_thread(self.balance_client.fetch_token_balance, address),
        )

    async def _transfers(self, address: str) -> List[TokenTransfer]:
        return await self.cache.get_or_load(
            ("wallet-transfers", address.lower()),
            lambda: asyncio.to_thread(self.transfer_client.fetch_token_transfers, address),
        )

    async def _token_price(self) -> float:
        return await self.cache.get_or_load(
            ("token-price",),
            lambda: asyncio.to_thread(self.price_source.fetch_token_usd_price),
        )

    async def fetch_inputs(self, address: str) -> Tuple[int, List[TokenTransfer], float]:
        balance_raw, transfers, price = await asyncio.gather(
            self._balance_raw(address),
            self._transfers(address),
            self._token_price(),
        )
        return balance_raw, transfers, price

    async def _build_chart_series(self, address: str, time_range: TimeRange) -> ChartSeries:
        balance_raw, transfers, price = await self.fetch_inputs(address)

        current_balance = to_token_units(balance_raw, self.config.token_decimals)
        current_value_usd = current_balance * price

        points = build_chart_points(
            time_range=time_range,
            address=address,
            current_balance=current_balance,
            token_price=price,
            transfers=transfers,
            token_decimals=self.config.token_decimals,
            now_ms=self.clock(),
            negligible_value_usd=self.config.negligible_value_usd,
        )
        return summarize_series(time_range, points, current_value_usd)

    async def chart_series(self, address: str, time_range: TimeRange) -> ChartSeries:
        return await self.cache.get_or_load(
            ("chart-series", address.lower(), time_range),
            lambda: self._build_chart_series(address, time_range),
        )

    async def _fallback_now_ms(self) -> int:
        # one mock timeline per cache window, shared by every fallback response
        async def load() -> int:
            return self.clock()

        return await self.cache.get_or_load(("fallback-clock",), load)

    async def get_chart(self, address: Optional[str] = None, time_range: TimeRange = "6H") -> ChartSeries:
        resolved = self._resolve_address(address)
        series = await self.chart_series(resolved, time_range)

        if not series_has_live_data(series, self.config.no_live_data_threshold_usd):
            log_info("No live data for chart, serving fallback", address=resolved, range=time_range)
            return build_fallback_chart(time_range, now_ms=await self._fallback_now_ms())

        return series

    async def get_dashboard(self, address: Optional[str] = None, time_range: TimeRange = "6H") -> DashboardData:
        config = self.config
        resolved = self._resolve_address(address)

        # warm the upstream reads once so both series share them
        balance_raw, _, price = await self.fetch_inputs(resolved)
        chart_1d, chart_requested = await asyncio.gather(
            self.chart_series(resolved, "1D"),
            self.chart_series(resolved, time_range),
        )

        balance = to_token_units(balance_raw, config.token_decimals)
        balance_usd = balance * price
        threshold = config.no_live_data_threshold_usd

        has_live_data = (
            balance_usd > threshold
            or series_has_live_data(chart_1d, threshold)
            or series_has_live_data(chart_requested, threshold)
        )
        if not has_live_data:
            log_info("No live data for dashboard, serving fallback", address=resolved, range=time_range, balance_usd=balance_usd)
            return build_fallback_dashboard(
                time_range,
                wallet_name=config.wallet_name,
                joined_at=config.joined_at,
                token_symbol=config.token_symbol,
                token_address=config.token_address,
                token_decimals=config.token_decimals,
                public_key=resolved,
                now_ms=await self._fallback_now_ms(),
            )

        return DashboardData(
            metrics=WalletMetrics(
                wallet_name=config.wallet_name,
                joined_at=config.joined_at,
                public_key=resolved,
                token_symbol=config.token_symbol,
                token_address=config.token_address,
                token_decimals=config.token_decimals,
                balance=balance,
                balance_usd=balance_usd,
                portfolio_value_usd=balance_usd,
                token_plus_portfolio_usd=balance_usd,
                pnl_today_usd=chart_1d.change_usd,
                pnl_today_percent=chart_1d.change_percent,
            ),
            chart=chart_requested,
        )
