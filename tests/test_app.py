"""Tests for the HTTP API routes."""

from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from app import create_app
from chains.covalent import CovalentClient
from core.gateway import UpstreamGateway
from core.models import WalletRef

from conftest import OTHER, WHALE
from test_covalent import BALANCE_ITEMS, TX_ITEMS, _envelope, _response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    covalent = CovalentClient(api_key="k", chain="eth-mainnet", session=session)
    gateway = UpstreamGateway(covalent, [WalletRef(WHALE, "Whale A"), WalletRef(OTHER, "Whale B")])
    return TestClient(create_app(gateway))


class TestStaticRoutes:

    def test_health(self, api):
        r = api.get("/api/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "message": "Whale API Server is running"}

    def test_whales(self, api):
        r = api.get("/api/whales")
        assert r.json() == [
            {"address": WHALE, "name": "Whale A"},
            {"address": OTHER, "name": "Whale B"},
        ]

    def test_cors_open(self, api):
        r = api.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert r.headers.get("access-control-allow-origin") == "*"


class TestDataRoutes:

    def test_balances(self, api, session):
        session.get.return_value = _response(payload=_envelope(BALANCE_ITEMS))
        r = api.get(f"/api/balances/{WHALE}")

        assert r.status_code == 200
        body = r.json()
        assert body["address"] == WHALE
        assert body["chain"] == "eth-mainnet"
        assert body["items"][0]["contract_ticker_symbol"] == "USDT"
        assert body["items"][0]["quote"] == 2500.0

    def test_transactions(self, api, session):
        session.get.return_value = _response(payload=_envelope(TX_ITEMS))
        body = api.get(f"/api/transactions/{WHALE}").json()

        assert [t["tx_hash"] for t in body["items"]] == ["0x01", "0x02"]
        assert body["items"][0]["value"] == "2000000000000000000"

    def test_transfers(self, api, session):
        items = [{"tx_hash": "0x09"}]
        session.get.return_value = _response(payload=_envelope(items))
        assert api.get(f"/api/transfers/{WHALE}").json()["items"] == items

    def test_analyze(self, api, session):
        session.get.return_value = _response(payload=_envelope(TX_ITEMS))
        body = api.get(f"/api/analyze/{WHALE}").json()

        assert body == {
            "outgoingCount": 1,
            "incomingCount": 1,
            "totalValueMoved": 3.0,
            "txCount": 2,
            "signal": "neutral",
            "message": "Neutral activity pattern",
        }

    def test_analyze_no_transactions(self, api, session):
        session.get.return_value = _response(payload={"data": None})
        r = api.get(f"/api/analyze/{WHALE}")

        assert r.status_code == 200
        assert r.json() == {"error": "No transactions found"}

    @pytest.mark.parametrize(
        "route,message",
        [
            ("balances", "Failed to fetch balances"),
            ("transactions", "Failed to fetch transactions"),
            ("transfers", "Failed to fetch transfers"),
            ("analyze", "Failed to analyze whale activity"),
        ],
    )
    def test_upstream_failure_is_500(self, api, session, route, message):
        session.get.return_value = _response(status=429, payload={"error": True})
        r = api.get(f"/api/{route}/{WHALE}")

        assert r.status_code == 500
        assert r.json() == {"error": message}

    def test_malformed_balance_item_is_json_500(self, api, session):
        session.get.return_value = _response(payload=_envelope([{"contract_decimals": "n/a"}]))
        r = api.get(f"/api/balances/{WHALE}")

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to fetch balances"}
