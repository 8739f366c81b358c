"""
Service wiring for the API: one PortfolioService per process, built from the
environment on first use.
"""
from typing import Optional
import logging

from services.cache import TTLCache
from services.config.config import AppConfig, ConfigError, get_config, get_config_status
from services.networks.etherscan import EtherscanClient
from services.networks.evm import TokenBalanceClient
from services.portfolio import PortfolioService
from services.price import DexScreenerPriceSource

logger = logging.getLogger(__name__)

# Shared by every request; pruned by the scheduler in main.py
cache = TTLCache()

_service: Optional[PortfolioService] = None


def build_portfolio_service(config: AppConfig, cache: TTLCache) -> PortfolioService:
    timeout = config.upstream_timeout_seconds
    return PortfolioService(
        config=config,
        balance_client=TokenBalanceClient(
            rpc_url=config.rpc_url,
            token_address=config.token_address,
            timeout=timeout,
        ),
        transfer_client=EtherscanClient(
            base_url=config.etherscan_base_url,
            api_key=config.etherscan_api_key,
            token_address=config.token_address,
            timeout=timeout,
        ),
        price_source=DexScreenerPriceSource(
            base_url=config.dexscreener_base_url,
            token_address=config.token_address,
            fallback_price=config.fallback_token_usd_price,
            timeout=timeout,
        ),
        cache=cache,
    )


def get_portfolio_service() -> Optional[PortfolioService]:
    """
    Dependency: the live PortfolioService, or None when the environment is
    missing keys or holds invalid values (callers then serve fallback data).
    """
    global _service
    if _service is not None:
        return _service

    status = get_config_status()
    if not status.is_ready:
        logger.warning(f"Configuration incomplete, serving fallback data. Missing keys: {', '.join(status.missing_keys)}")
        return None

    try:
        config = get_config()
    except ConfigError as e:
        logger.warning(f"Configuration invalid, serving fallback data: {str(e)}")
        return None

    cache.ttl_seconds = config.cache_ttl_seconds
    _service = build_portfolio_service(config, cache)
    return _service
