"""
HTTP surface: routing, request validation and the configuration-absent fallback.
"""
import pytest
from fastapi.testclient import TestClient

from dependencies import get_portfolio_service
from main import app
from services.config.config import REQUIRED_KEYS
from services.fallback import MOCK_CURRENT_VALUE_USD

from conftest import TOKEN, TRACKED


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def live_service(make_service, make_transfer):
    service, *_ = make_service(balance_tokens=1000, price=1.0, transfers=[make_transfer(hours_ago=2, tokens=200)])
    app.dependency_overrides[get_portfolio_service] = lambda: service
    return service


@pytest.fixture
def no_service():
    app.dependency_overrides[get_portfolio_service] = lambda: None


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/health").json() == {"status": "healthy", "service": "wallet-dashboard"}


def test_ready_reports_missing_keys(client, monkeypatch):
    for key in REQUIRED_KEYS:
        monkeypatch.delenv(key, raising=False)

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["missing_keys"] == REQUIRED_KEYS


def test_ready_when_configured(client, monkeypatch):
    monkeypatch.setenv("TRACKED_PUBLIC_KEY", TRACKED)
    monkeypatch.setenv("TOKEN_ADDRESS", TOKEN)
    monkeypatch.setenv("RPC_URL", "https://rpc.example.org")
    monkeypatch.setenv("ETHERSCAN_API_KEY", "abc123")

    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_ranges(client):
    assert client.get("/portfolio/ranges").json() == {"ranges": ["1H", "6H", "1D", "1W", "1M", "ALL"]}


class TestUnconfigured:
    def test_dashboard_serves_fallback(self, client, no_service):
        response = client.post("/portfolio/dashboard", json={"range": "1M"})
        body = response.json()

        assert response.status_code == 200
        assert body["metrics"]["wallet_name"] == "My Wallet"
        assert body["metrics"]["balance_usd"] == MOCK_CURRENT_VALUE_USD
        assert body["chart"]["range"] == "1M"
        assert len(body["chart"]["points"]) == 34

    def test_chart_serves_fallback(self, client, no_service):
        response = client.post("/portfolio/chart", json={"address": TRACKED, "range": "1H"})
        body = response.json()

        assert response.status_code == 200
        assert body["range"] == "1H"
        assert body["current_value_usd"] == MOCK_CURRENT_VALUE_USD
        assert len(body["points"]) == 16


class TestLive:
    def test_dashboard(self, client, live_service):
        response = client.post("/portfolio/dashboard", json={"range": "6H"})
        body = response.json()

        assert response.status_code == 200
        assert body["metrics"]["balance"] == pytest.approx(1000.0)
        assert body["metrics"]["public_key"] == TRACKED
        assert body["metrics"]["token_symbol"] == "TST"
        assert body["chart"]["current_value_usd"] == 1000.0
        assert body["chart"]["change_usd"] == pytest.approx(200.0)

    def test_chart_defaults_to_six_hours(self, client, live_service):
        body = client.post("/portfolio/chart", json={}).json()

        assert body["range"] == "6H"
        assert len(body["points"]) == 24
        assert body["points"][-1]["value_usd"] == 1000.0


class TestValidation:
    def test_bad_address(self, client, no_service):
        response = client.post("/portfolio/chart", json={"address": "0x1234", "range": "1D"})
        body = response.json()

        assert response.status_code == 422
        assert body["detail"] == "Validation error"
        assert body["errors"][0]["field"] == "body -> address"

    def test_unknown_range(self, client, no_service):
        response = client.post("/portfolio/dashboard", json={"range": "2Y"})
        assert response.status_code == 422
        assert body_fields(response) == ["body -> range"]

    def test_blank_address_means_tracked_wallet(self, client, live_service):
        response = client.post("/portfolio/chart", json={"address": "", "range": "6H"})
        assert response.status_code == 200
        assert response.json()["current_value_usd"] == 1000.0


def body_fields(response):
    return [error["field"] for error in response.json()["errors"]]
