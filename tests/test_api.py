"""
Pytest tests for the console endpoints (handlers + FastAPI app).

The signing authority and RPC node are test doubles from conftest.
"""

from __future__ import annotations

import re

import httpx
import pytest

from console_wallet.errors import SigningErrorKind
from console_wallet.wallet.derivation import derive_address

from conftest import TX_HASH

ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")
TX_BODY = {"playerId": "p123", "contractAddress": "0x" + "11" * 20, "functionData": "0xa9059cbb"}


# ---------------------------------------------------------------------------
# POST /api/console-account
# ---------------------------------------------------------------------------


def test_create_account_happy_path(client, config):
    r = client.post("/api/console-account", json={"platform": "xbox", "playerId": "p123"})
    assert r.status_code == 200
    data = r.json()
    assert data["platform"] == "xbox"
    assert data["playerId"] == "p123"
    assert ADDRESS_RE.match(data["walletAddress"])
    assert data["walletAddress"] == derive_address("xbox", "p123", config.derivation)
    assert data["kmsKeyRef"] == "arn:aws:kms:us-east-1:123456789012:key/cryptoquest_xbox_p123"
    assert data["isActive"] is True
    assert r.headers["content-type"].startswith("application/json")


def test_create_account_is_repeatable(client):
    body = {"platform": "ps5", "playerId": "gamer-1"}
    first = client.post("/api/console-account", json=body).json()
    second = client.post("/api/console-account", json=body).json()
    assert first == second


@pytest.mark.parametrize(
    "body",
    [
        {"platform": "xbox"},
        {"playerId": "p123"},
        {"platform": "", "playerId": "p123"},
        {"platform": "xbox", "playerId": ""},
        {"platform": "xbox", "playerId": 123},
        ["xbox", "p123"],
    ],
)
def test_create_account_missing_fields(client, body):
    r = client.post("/api/console-account", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing platform or playerId"}


def test_create_account_invalid_json(client):
    r = client.post(
        "/api/console-account",
        content=b"{platform: xbox",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON"}


@pytest.mark.parametrize("platform", ["a" * 16, "xbox_one", "ps 5"])
def test_create_account_invalid_platform(client, platform):
    r = client.post("/api/console-account", json={"platform": platform, "playerId": "p123"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid platform"}


def test_create_account_player_id_too_long(client):
    r = client.post("/api/console-account", json={"platform": "xbox", "playerId": "x" * 128})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid playerId"}


def test_create_account_platform_allow_list(config, signer, rpc_node):
    from fastapi.testclient import TestClient

    from console_wallet.server.app import create_app

    config.platforms.allowed = ["ps5", "xbox"]
    client = TestClient(create_app(config, signer=signer, relay_transport=rpc_node.transport))
    assert client.post("/api/console-account", json={"platform": "xbox", "playerId": "p1"}).status_code == 200
    r = client.post("/api/console-account", json={"platform": "switch", "playerId": "p1"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid platform"}
    # Codes are matched exactly; "XBOX" would derive a different wallet.
    assert client.post("/api/console-account", json={"platform": "XBOX", "playerId": "p1"}).status_code == 400


# ---------------------------------------------------------------------------
# POST /api/proxy-tx
# ---------------------------------------------------------------------------


def test_proxy_tx_happy_path(client, signer, rpc_node):
    r = client.post("/api/proxy-tx", json=TX_BODY)
    assert r.status_code == 200
    assert r.json() == {"txHash": TX_HASH, "status": "pending"}

    assert signer.calls == [
        ("arn:aws:kms:us-east-1:123456789012:key/cryptoquest_console_p123", "0xa9059cbb")
    ]
    assert len(rpc_node.requests) == 1
    assert rpc_node.requests[0]["method"] == "eth_sendRawTransaction"
    assert rpc_node.requests[0]["params"] == [signer.signature]


def test_proxy_tx_key_platform_is_configurable(client, config, signer):
    config.transactions.key_platform = "ps5"
    client.post("/api/proxy-tx", json=TX_BODY)
    assert signer.calls[0][0].endswith("cryptoquest_ps5_p123")


@pytest.mark.parametrize("missing", ["playerId", "contractAddress", "functionData"])
def test_proxy_tx_missing_fields(client, signer, rpc_node, missing):
    body = {k: v for k, v in TX_BODY.items() if k != missing}
    r = client.post("/api/proxy-tx", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}
    assert signer.calls == []
    assert rpc_node.requests == []


def test_proxy_tx_invalid_json(client):
    r = client.post("/api/proxy-tx", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON"}


@pytest.mark.parametrize("kind", list(SigningErrorKind))
def test_proxy_tx_signing_failure_never_relays(client, signer, rpc_node, kind):
    signer.fail_with = kind
    r = client.post("/api/proxy-tx", json=TX_BODY)
    assert r.status_code == 200
    data = r.json()
    assert data == {"error": "Transaction failed"}
    assert "txHash" not in data
    assert len(signer.calls) == 1
    assert rpc_node.requests == []


def test_proxy_tx_transport_failure(client, rpc_node):
    rpc_node.raise_exc = httpx.ConnectError("connection refused")
    r = client.post("/api/proxy-tx", json=TX_BODY)
    assert r.status_code == 200
    assert r.json() == {"error": "Network error"}


def test_proxy_tx_malformed_rpc_response(client, rpc_node):
    rpc_node.raw = b"502 Bad Gateway"
    r = client.post("/api/proxy-tx", json=TX_BODY)
    data = r.json()
    assert data == {"error": "Transaction failed"}
    assert "txHash" not in data


def test_proxy_tx_undecodable_rpc_body(client, rpc_node):
    rpc_node.raw = b"not gzip at all"
    rpc_node.headers = {"Content-Encoding": "gzip"}
    r = client.post("/api/proxy-tx", json=TX_BODY)
    assert r.status_code == 200
    assert r.json() == {"error": "Transaction failed"}


def test_proxy_tx_rpc_error_object(client, rpc_node):
    rpc_node.response = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "insufficient funds"}}
    r = client.post("/api/proxy-tx", json=TX_BODY)
    assert r.json() == {"error": "Transaction failed"}


# ---------------------------------------------------------------------------
# HTTP plumbing
# ---------------------------------------------------------------------------


def test_unknown_route_returns_json_404(client):
    r = client.post("/api/nope", json={})
    assert r.status_code == 404
    assert r.json() == {"error": "Endpoint not found"}


def test_wrong_method_returns_json_error(client):
    r = client.get("/api/console-account")
    assert r.status_code == 405
    assert "error" in r.json()


def test_cors_preflight(client):
    r = client.options(
        "/api/proxy-tx",
        headers={
            "Origin": "https://game.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert "POST" in r.headers["access-control-allow-methods"]


def test_cors_header_on_response(client):
    r = client.post(
        "/api/console-account",
        json={"platform": "xbox", "playerId": "p123"},
        headers={"Origin": "https://game.example"},
    )
    assert r.headers["access-control-allow-origin"] == "*"
