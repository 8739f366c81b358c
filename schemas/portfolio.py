from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional, get_args

from services.networks.evm import validate_address

TimeRange = Literal["1H", "6H", "1D", "1W", "1M", "ALL"]
TIME_RANGES = get_args(TimeRange)


class ChartPoint(BaseModel):
    timestamp: int  # ms since epoch
    value_usd: float


class ChartSeries(BaseModel):
    range: TimeRange
    points: List[ChartPoint]
    start_value_usd: float
    current_value_usd: float
    change_usd: float
    change_percent: float


class WalletMetrics(BaseModel):
    wallet_name: str
    joined_at: str
    public_key: str
    token_symbol: str
    token_address: str
    token_decimals: int
    balance: float
    balance_usd: float
    portfolio_value_usd: float
    token_plus_portfolio_usd: float
    pnl_today_usd: float
    pnl_today_percent: float


class DashboardData(BaseModel):
    metrics: WalletMetrics
    chart: ChartSeries


class PortfolioRequest(BaseModel):
    address: Optional[str] = Field(default=None, description="Wallet address (defaults to the tracked wallet)")
    range: TimeRange = Field(default="6H", description="Look-back window: 1H, 6H, 1D, 1W, 1M or ALL")

    @field_validator('address')
    @classmethod
    def check_address(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return validate_address(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "address": "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb5",
                "range": "1D"
            }
        }
    }
