"""
Tests for the FastAPI surface in main.py
Run with: pytest tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from rangebook.main import app, get_session
from rangebook.services.price_feed import StaticPriceSource
from rangebook.services.session import BettingSession

BTC_LEG = {"asset_id": "BTC", "timeframe": "24-hour", "lower_bound": 49500, "upper_bound": 50500}


@pytest.fixture
def session():
    return BettingSession(price_source=StaticPriceSource({"bitcoin": 50000.0, "ethereum": 3000.0}))


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRegistries:
    """Static registries and live prices."""

    def test_root(self, client):
        body = client.get("/").json()
        assert body["app"] == "Rangebook"
        assert body["status"] == "operational"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["tickets"] == 0

    def test_assets(self, client):
        assets = client.get("/api/assets").json()
        assert [a["asset_id"] for a in assets] == ["BTC", "ETH", "SOL", "LINK", "DOGE"]
        assert assets[0]["volatility"] == 0.02

    def test_timeframes(self, client):
        tfs = client.get("/api/timeframes").json()
        assert tfs[0] == {"name": "1-hour", "hours": 1}
        assert tfs[-1] == {"name": "30-day", "hours": 720}

    def test_price(self, client):
        r = client.get("/api/prices/BTC")
        assert r.status_code == 200
        assert r.json() == {"asset_id": "BTC", "symbol": "bitcoin", "price": 50000.0}

    def test_price_unavailable(self, client):
        assert client.get("/api/prices/SOL").status_code == 503

    def test_price_unknown_asset(self, client):
        assert client.get("/api/prices/XRP").status_code == 404


class TestParlayEndpoints:
    """Leg construction over HTTP."""

    def test_add_leg(self, client):
        r = client.post("/api/parlay/legs", json=BTC_LEG)
        assert r.status_code == 200
        body = r.json()
        assert body["probability"] == 0.25
        assert body["payout_odds"] == pytest.approx(3.72)
        assert body["summary"] == "BTC | 24-hour | $49500 - $50500 | P: 25.00% | Odds: 3.72x"

    def test_add_leg_out_of_bounds(self, client):
        r = client.post("/api/parlay/legs", json={**BTC_LEG, "lower_bound": 49900, "upper_bound": 50100})
        assert r.status_code == 422
        assert r.json()["detail"]["reason"] == "range_out_of_bounds"

    def test_add_leg_inverted(self, client):
        r = client.post("/api/parlay/legs", json={**BTC_LEG, "lower_bound": 50500, "upper_bound": 49500})
        assert r.status_code == 422
        assert r.json()["detail"]["reason"] == "invalid_range"

    def test_add_leg_without_price(self, client):
        r = client.post("/api/parlay/legs", json={**BTC_LEG, "asset_id": "SOL"})
        assert r.status_code == 503
        assert r.json()["detail"]["reason"] == "price_unavailable"

    def test_get_parlay_with_quote(self, client):
        client.post("/api/parlay/legs", json=BTC_LEG)
        body = client.get("/api/parlay", params={"stake": 100}).json()
        assert len(body["legs"]) == 1
        assert body["quote"]["combined_probability"] == pytest.approx(0.2125)
        assert body["quote"]["potential_payout"] == pytest.approx(100 * 0.93 / 0.2125)
        assert body["quote"]["over_probability_cap"] is False

    def test_remove_leg(self, client):
        client.post("/api/parlay/legs", json=BTC_LEG)
        r = client.delete("/api/parlay/legs/0")
        assert r.status_code == 200
        assert client.get("/api/parlay").json()["legs"] == []

    def test_remove_missing_leg(self, client):
        r = client.delete("/api/parlay/legs/0")
        assert r.status_code == 422
        assert r.json()["detail"]["reason"] == "invalid_input"


class TestBetEndpoints:
    """Submission and history."""

    def test_place_bet(self, client, session):
        client.post("/api/parlay/legs", json=BTC_LEG)
        r = client.post("/api/bets", json={"stake": 100})
        assert r.status_code == 200
        ticket = r.json()
        assert ticket["result"] == "pending"
        assert ticket["stake"] == 100
        assert ticket["combined_odds"] == pytest.approx(0.93 / 0.2125)
        assert len(ticket["legs"]) == 1
        assert session.legs() == ()

        history = client.get("/api/bets").json()
        assert history["total"] == 1
        assert history["tickets"][0]["ticket_id"] == ticket["ticket_id"]

    def test_place_empty_bet(self, client):
        r = client.post("/api/bets", json={"stake": 100})
        assert r.status_code == 422
        assert r.json()["detail"]["reason"] == "empty_parlay"

    def test_exposure_rejection(self, client):
        client.post("/api/parlay/legs", json=BTC_LEG)
        r = client.post("/api/bets", json={"stake": 1000})
        assert r.status_code == 422
        assert r.json()["detail"]["reason"] == "exposure_cap_exceeded"

    def test_history_newest_first(self, client):
        client.post("/api/parlay/legs", json=BTC_LEG)
        first = client.post("/api/bets", json={"stake": 10}).json()
        client.post("/api/parlay/legs", json=BTC_LEG)
        second = client.post("/api/bets", json={"stake": 20}).json()

        tickets = client.get("/api/bets").json()["tickets"]
        assert [t["ticket_id"] for t in tickets] == [second["ticket_id"], first["ticket_id"]]
        assert client.get("/api/bets", params={"limit": 1}).json()["total"] == 2
