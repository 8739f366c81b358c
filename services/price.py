"""
Token/USD price lookup against DexScreener.

The most liquid pair quoting a USD price wins. Anything else (HTTP error,
timeout, empty pair list, unparsable or non-positive price) returns the
configured fallback price.
"""
from typing import Optional
import logging
import math

import requests

logger = logging.getLogger(__name__)


class DexScreenerPriceSource:
    def __init__(self, base_url: str, token_address: str, fallback_price: float, timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.token_address = token_address
        self.fallback_price = fallback_price
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_token_usd_price(self) -> float:
        url = f"{self.base_url}/{self.token_address}"
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"DexScreener request failed: {str(e)}")
            return self.fallback_price

        if response.status_code != 200:
            logger.warning(f"DexScreener HTTP {response.status_code} for token={self.token_address}")
            return self.fallback_price

        try:
            payload = response.json()
            pairs = payload.get("pairs") or []
            priced = [pair for pair in pairs if pair.get("priceUsd")]
            if not priced:
                return self.fallback_price
            best = max(priced, key=lambda pair: float((pair.get("liquidity") or {}).get("usd") or 0))
            price = float(best["priceUsd"])
        except (ValueError, TypeError, AttributeError, KeyError) as e:
            logger.warning(f"DexScreener payload malformed: {str(e)}")
            return self.fallback_price

        if not math.isfinite(price) or price <= 0:
            return self.fallback_price
        return price
