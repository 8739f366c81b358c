from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception
from requests.exceptions import RequestException
from decimal import Decimal
from typing import Optional
import os
import logging

logger = logging.getLogger(__name__)

# Only balanceOf is read
ERC20_ABI = [
    {"inputs": [{"internalType": "address", "name": "account", "type": "address"}], "name": "balanceOf", "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
]


def validate_address(v: str) -> str:
    """Validate Ethereum address format (0x + 40 hex characters)"""
    if not v or not isinstance(v, str):
        raise ValueError("Address is required and must be a string")

    v = v.strip()

    if not v.startswith("0x"):
        raise ValueError("Address must start with '0x'")

    if len(v) != 42:
        raise ValueError("Address must be 42 characters (0x + 40 hex characters)")

    try:
        int(v[2:], 16)
    except ValueError:
        raise ValueError("Address must contain valid hexadecimal characters")

    return v


def to_token_units(raw: int, decimals: int) -> float:
    """Convert a raw integer token amount to a human readable magnitude."""
    return float(Decimal(int(raw)) / (Decimal(10) ** decimals))


def _build_request_kwargs(timeout: float) -> dict:
    # By default, bypass proxy for RPC calls to avoid authentication issues
    request_kwargs = {
        'timeout': timeout,
        'proxies': {
            'http': None,
            'https': None
        }
    }

    http_proxy = os.getenv('HTTP_PROXY') or os.getenv('http_proxy')
    https_proxy = os.getenv('HTTPS_PROXY') or os.getenv('https_proxy')

    if http_proxy or https_proxy:
        request_kwargs['proxies'] = {}
        if http_proxy:
            request_kwargs['proxies']['http'] = http_proxy
        if https_proxy:
            request_kwargs['proxies']['https'] = https_proxy

    return request_kwargs


def _get_w3(rpc_url: str, timeout: float = 10) -> Web3:
    if not rpc_url.startswith(("http://", "https://")):
        raise ValueError(f"Invalid RPC URL format: {rpc_url}. URL must start with http:// or https://")
    return Web3(Web3.HTTPProvider(
        rpc_url,
        request_kwargs=_build_request_kwargs(timeout)
    ))


class TokenBalanceClient:
    """Reads the ERC20 balance of an address straight from the RPC node."""

    def __init__(self, rpc_url: str, token_address: str, timeout: float = 10, w3: Optional[Web3] = None):
        self.rpc_url = rpc_url
        self.token_address = token_address
        self.timeout = timeout
        self._w3 = w3

    @property
    def w3(self) -> Web3:
        if self._w3 is None:
            self._w3 = _get_w3(self.rpc_url, self.timeout)
        return self._w3

    def fetch_token_balance(self, address: str) -> int:
        """
        Return the raw balanceOf(address) for the configured token.

        Any RPC, transport or decoding failure is logged and reported as a
        zero balance so the dashboard can still render.
        """
        try:
            contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(self.token_address),
                abi=ERC20_ABI
            )
            balance_raw = contract.functions.balanceOf(
                Web3.to_checksum_address(address)
            ).call()
            return int(balance_raw)
        except (ContractLogicError, Web3Exception, RequestException, OSError, ValueError, TypeError) as e:
            logger.warning(f"RPC balanceOf failed for {address}: {str(e)}")
            return 0
