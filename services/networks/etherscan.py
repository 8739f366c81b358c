"""
Etherscan adapter - token transfer history for the tracked wallet.

Every failure mode (HTTP error, NOTOK envelope, network error, malformed
payload) degrades to the caller-supplied fallback and is logged as a warning.
An empty history ("No transactions found") is normal and not logged.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

import requests

logger = logging.getLogger(__name__)

NO_TRANSACTIONS = "No transactions found"


@dataclass(frozen=True)
class TokenTransfer:
    tx_hash: str
    from_address: str
    to_address: str
    value_raw: int
    timestamp: int  # ms since epoch


class EtherscanClient:
    def __init__(self, base_url: str, api_key: str, token_address: str, timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.api_key = api_key
        self.token_address = token_address
        self.timeout = timeout
        self._session = session or requests.Session()

    def _call(self, params: Dict[str, str], fallback: Any) -> Any:
        action = params.get("action", "unknown")
        query = dict(params)
        query["apikey"] = self.api_key

        try:
            response = self._session.get(self.base_url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Etherscan request failed for action={action}: {str(e)}")
            return fallback

        if response.status_code != 200:
            logger.warning(f"Etherscan HTTP {response.status_code} for action={action}")
            return fallback

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Etherscan returned non-JSON body for action={action}")
            return fallback

        if not isinstance(payload, dict):
            logger.warning(f"Etherscan returned malformed envelope for action={action}")
            return fallback

        status = str(payload.get("status", ""))
        message = str(payload.get("message", ""))
        result = payload.get("result")

        if status == "1" and result is not None:
            return result

        if status == "0":
            no_data = message == NO_TRANSACTIONS or result == NO_TRANSACTIONS
            if not no_data:
                detail = result if isinstance(result, str) else message
                logger.warning(f"Etherscan NOTOK for action={action}: {detail}")
            return fallback

        return fallback if result is None else result

    def fetch_token_transfers(self, address: str) -> List[TokenTransfer]:
        """
        Return the token transfers touching `address`, oldest first.

        Errored transactions are dropped and addresses are lower-cased so
        callers can compare them directly.
        """
        result = self._call(
            {
                "module": "account",
                "action": "tokentx",
                "contractaddress": self.token_address,
                "address": address,
                "startblock": "0",
                "endblock": "99999999",
                "sort": "asc",
            },
            [],
        )

        if not isinstance(result, list):
            return []

        transfers = []
        try:
            for tx in result:
                if str(tx.get("isError", "0")) != "0":
                    continue
                transfers.append(TokenTransfer(
                    tx_hash=tx["hash"],
                    from_address=str(tx["from"]).lower(),
                    to_address=str(tx["to"]).lower(),
                    value_raw=int(tx.get("value") or "0"),
                    timestamp=int(tx["timeStamp"]) * 1000,
                ))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Etherscan tokentx payload malformed for {address}: {str(e)}")
            return []

        transfers.sort(key=lambda t: t.timestamp)
        return transfers
