"""
Pytest fixtures: in-memory upstream clients and a PortfolioService wired to them.
"""
import pytest

from services.cache import TTLCache
from services.config.config import AppConfig
from services.networks.etherscan import TokenTransfer
from services.portfolio import PortfolioService

TRACKED = "0x" + "ab" * 20
OTHER = "0x" + "cd" * 20
TOKEN = "0x" + "12" * 20
NOW_MS = 1_760_000_000_000
DECIMALS = 6


class FakeBalanceClient:
    def __init__(self, balance_raw: int = 0):
        self.balance_raw = balance_raw
        self.calls = []

    def fetch_token_balance(self, address: str) -> int:
        self.calls.append(address)
        return self.balance_raw


class FakeTransferClient:
    def __init__(self, transfers=None):
        self.transfers = list(transfers or [])
        self.calls = []

    def fetch_token_transfers(self, address: str):
        self.calls.append(address)
        return list(self.transfers)


class FakePriceSource:
    def __init__(self, price: float = 1.0):
        self.price = price
        self.calls = 0

    def fetch_token_usd_price(self) -> float:
        self.calls += 1
        return self.price


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def raw(tokens: float) -> int:
    return int(round(tokens * 10 ** DECIMALS))


@pytest.fixture
def config():
    return AppConfig(
        wallet_name="Test Wallet",
        tracked_public_key=TRACKED,
        token_address=TOKEN,
        token_symbol="TST",
        token_decimals=DECIMALS,
        rpc_url="http://localhost:8545",
        etherscan_api_key="test-key",
        joined_at="2025-12-01",
    )


@pytest.fixture
def make_transfer():
    def _make(hours_ago: float, tokens: float, inbound: bool = True, tx_hash: str = "0xhash"):
        return TokenTransfer(
            tx_hash=tx_hash,
            from_address=OTHER if inbound else TRACKED,
            to_address=TRACKED if inbound else OTHER,
            value_raw=raw(tokens),
            timestamp=NOW_MS - int(hours_ago * 60 * 60 * 1000),
        )
    return _make


@pytest.fixture
def make_service(config):
    """Factory returning (service, balance_client, transfer_client, price_source, cache_clock)."""
    def _make(balance_tokens: float = 0.0, price: float = 1.0, transfers=None, service_config=None):
        balance_client = FakeBalanceClient(raw(balance_tokens))
        transfer_client = FakeTransferClient(transfers)
        price_source = FakePriceSource(price)
        cache_clock = FakeClock()
        service = PortfolioService(
            config=service_config or config,
            balance_client=balance_client,
            transfer_client=transfer_client,
            price_source=price_source,
            cache=TTLCache(ttl_seconds=60, clock=cache_clock),
            clock=lambda: NOW_MS,
        )
        return service, balance_client, transfer_client, price_source, cache_clock
    return _make
