"""
Pytest fixtures for the console wallet backend. The signing authority and
the RPC node are replaced by in-process doubles; no test touches the network.
"""

from __future__ import annotations

import json

import httpx
import pytest

from console_wallet.config import ConsoleBackendConfig
from console_wallet.errors import SigningError, SigningErrorKind
from console_wallet.signing.base import Signer

RPC_URL = "https://rpc.test.invalid"
TX_HASH = "0x" + "ab" * 32


class RecordingSigner(Signer):
    """Signer double that records calls and can be told to fail."""

    name = "recording"

    def __init__(self, signature: str = "0xf86c0a85", fail_with: SigningErrorKind | None = None):
        self.signature = signature
        self.fail_with = fail_with
        self.calls: list[tuple[str, str]] = []

    @classmethod
    def from_config(cls, config):
        return cls()

    async def sign(self, key_reference: str, payload: str) -> str:
        self.calls.append((key_reference, payload))
        if self.fail_with is not None:
            raise SigningError(self.fail_with)
        return self.signature


class RpcNode:
    """Callable httpx handler standing in for a JSON-RPC node."""

    def __init__(
        self,
        response=None,
        raise_exc: Exception | None = None,
        raw: bytes | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.response = response if response is not None else {"jsonrpc": "2.0", "id": 1, "result": TX_HASH}
        self.raise_exc = raise_exc
        self.raw = raw
        self.headers = headers or {}
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.raw is not None:
            return httpx.Response(200, headers=self.headers, content=self.raw)
        return httpx.Response(200, json=self.response)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def config():
    cfg = ConsoleBackendConfig()
    cfg.relay.rpc_url = RPC_URL
    return cfg


@pytest.fixture
def signer():
    return RecordingSigner()


@pytest.fixture
def rpc_node():
    return RpcNode()


@pytest.fixture
def client(config, signer, rpc_node):
    """FastAPI TestClient wired to the recording signer and fake RPC node."""
    from fastapi.testclient import TestClient

    from console_wallet.server.app import create_app

    app = create_app(config, signer=signer, relay_transport=rpc_node.transport)
    with TestClient(app) as test_client:
        yield test_client
