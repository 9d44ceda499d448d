"""HTTP API tests."""

import pytest
from fastapi.testclient import TestClient

from omnioracle.api.main import create_app
from omnioracle.ledger import LedgerStore
from omnioracle.models import OracleStatus
from omnioracle.storage import MemoryRepository

from conftest import ScriptedOracle


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as c:
        yield c


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_and_filter_markets(client):
    body = client.get("/markets").json()
    assert body["total"] == 2
    assert body["markets"][0]["market_id"] == "m1"
    disputed = client.get("/markets", params={"status": "dispute_window"}).json()
    assert [m["market_id"] for m in disputed["markets"]] == ["m2"]


def test_market_not_found_uses_error_shape(client):
    resp = client.get("/markets/nope")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Market not found: nope", "code": "not_found"}


def test_trade_flow(client):
    resp = client.post("/markets/m1/trades", json={"outcome": "YES", "amount": 500})
    assert resp.status_code == 200
    body = resp.json()
    assert body["price"] == 0.65
    assert body["balance"] == 2000
    assert body["probabilities"] == pytest.approx([0.67, 0.33])
    trades = client.get("/trades", params={"market_id": "m1"}).json()
    assert trades["total"] == 1
    portfolio = client.get("/portfolio").json()
    assert portfolio["positions"][0]["market_id"] == "m1"
    assert portfolio["portfolio_value"] == pytest.approx(body["shares"] * 0.67)
    assert portfolio["user"]["portfolio_value"] == pytest.approx(portfolio["portfolio_value"])


def test_rejected_trade(client):
    resp = client.post("/markets/m1/trades", json={"outcome": "NO", "amount": 10_000})
    assert resp.status_code == 400
    assert resp.json()["code"] == "insufficient_balance"
    resp = client.post("/markets/m2/trades", json={"outcome": "NO", "amount": 1})
    assert resp.json()["code"] == "market_not_active"


def test_create_market(client):
    draft = {
        "title": "Rain in Lisbon tomorrow?",
        "end_date": "2031-01-01T00:00:00Z",
        "initial_probability": 0.4,
        "resolution_criteria": "IPMA daily report",
        "oracle_source": {"type": "HUMAN_VALIDATOR", "id": "v1", "name": "Local validator"},
    }
    resp = client.post("/markets", json=draft)
    assert resp.status_code == 201
    market = resp.json()
    assert market["status"] == "ACTIVE"
    assert market["oracle_config"]["primary_source"]["type"] == "HUMAN_VALIDATOR"
    bad = client.post("/markets", json={**draft, "initial_probability": 2})
    assert bad.status_code == 422


def test_settle_and_resolve(settings):
    store = LedgerStore(MemoryRepository(), settings, ScriptedOracle(OracleStatus.CONFLICT))
    with TestClient(create_app(store)) as client:
        settled = client.post("/markets/m1/settle").json()
        assert settled["status"] == "DISPUTE_WINDOW"
        resolved = client.post("/markets/m1/resolve", json={"outcome": "NO"}).json()
        assert resolved["status"] == "RESOLVED"
        assert resolved["resolution_value"] == "NO"
        again = client.post("/markets/m1/resolve", json={"outcome": "YES"})
        assert again.status_code == 400
        assert again.json()["code"] == "illegal_transition"


def test_status_cancel_connect_reset(client):
    locked = client.post("/markets/m1/status", json={"status": "LOCKED"}).json()
    assert locked["status"] == "LOCKED"
    cancelled = client.post("/markets/m1/cancel", json={"reason": "oracle retired"}).json()
    assert cancelled["resolution_history"][-1]["details"] == "oracle retired"
    user = client.post("/session/connect", json={"wallet_address": "0xabc"}).json()
    assert user["is_connected"] is True
    assert client.post("/admin/reset").json() == {"status": "reset"}
    assert client.get("/markets/m1").json()["status"] == "ACTIVE"
