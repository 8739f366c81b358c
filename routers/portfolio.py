from fastapi import APIRouter, Depends
from typing import Optional

from dependencies import get_portfolio_service
from schemas.portfolio import TIME_RANGES, ChartSeries, DashboardData, PortfolioRequest
from services.fallback import build_fallback_chart, build_fallback_dashboard
from services.portfolio import PortfolioService

router = APIRouter()


@router.post("/dashboard", response_model=DashboardData)
async def get_dashboard(req: PortfolioRequest, service: Optional[PortfolioService] = Depends(get_portfolio_service)):
    """
    Wallet metrics plus the value chart for the requested range.

    Request body (JSON):
    {
        "address": "0x..." (optional, defaults to the tracked wallet),
        "range": "1H" | "6H" | "1D" | "1W" | "1M" | "ALL" (optional, defaults to "6H")
    }
    """
    if service is None:
        return build_fallback_dashboard(req.range)
    return await service.get_dashboard(req.address, req.range)


@router.post("/chart", response_model=ChartSeries)
async def get_chart(req: PortfolioRequest, service: Optional[PortfolioService] = Depends(get_portfolio_service)):
    """Value chart for one range; same body as /dashboard."""
    if service is None:
        return build_fallback_chart(req.range)
    return await service.get_chart(req.address, req.range)


@router.get("/ranges")
def get_ranges():
    return {"ranges": list(TIME_RANGES)}
