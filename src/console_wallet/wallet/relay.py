"""JSON-RPC relay of signed transactions to an EVM node."""

from __future__ import annotations

import json
import logging

import httpx

from console_wallet.config import RelayConfig
from console_wallet.errors import NetworkError, RelayError, RpcError
from console_wallet.models import RelayResult, SignedTransaction
from console_wallet.wallet.chains import get_chain

logger = logging.getLogger("console_wallet.wallet.relay")

SEND_RAW_TRANSACTION = "eth_sendRawTransaction"


def resolve_rpc_url(config: RelayConfig) -> str:
    """Explicit ``rpc_url`` wins; otherwise the chain's public endpoint."""
    if config.rpc_url:
        return config.rpc_url
    return get_chain(config.chain).rpc_url


class RelayClient:
    """Submits signed transactions via ``eth_sendRawTransaction``.

    A fresh :class:`httpx.AsyncClient` is opened for every call so no
    connection state is shared between requests. Nothing is retried: a
    signed transaction resent blindly may land on chain twice.

    Parameters
    ----------
    rpc_url:
        JSON-RPC endpoint of the node.
    timeout:
        Bound on the whole call; a timeout is reported as a network error.
    request_id:
        JSON-RPC ``id`` sent with every request.
    transport:
        Optional httpx transport, used by tests to stand in for the node.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: httpx.Timeout,
        request_id: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.request_id = request_id
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RelayClient:
        timeout = httpx.Timeout(
            config.timeout_seconds, connect=config.connect_timeout_seconds
        )
        return cls(
            rpc_url=resolve_rpc_url(config),
            timeout=timeout,
            request_id=config.request_id,
            transport=transport,
        )

    def build_request(self, signed: SignedTransaction) -> dict:
        return {
            "jsonrpc": "2.0",
            "method": SEND_RAW_TRANSACTION,
            "params": [signed.raw_hex],
            "id": self.request_id,
        }

    async def relay(self, signed: SignedTransaction) -> RelayResult:
        """Broadcast *signed* and return its hash or the reason it failed."""
        try:
            tx_hash = await self._send(signed)
        except RelayError as exc:
            logger.warning(
                f"Relay failed for {signed.key_reference}: "
                f"{type(exc).__name__}: {exc}"
            )
            return RelayResult(error=exc)
        logger.info(f"Relayed transaction for {signed.key_reference}: tx={tx_hash}")
        return RelayResult(tx_hash=tx_hash)

    async def _send(self, signed: SignedTransaction) -> str:
        payload = self.build_request(signed)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                body = resp.content
        except httpx.TimeoutException as exc:
            raise NetworkError(f"RPC request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"RPC transport error: {exc}") from exc
        except httpx.DecodingError as exc:
            raise RpcError(f"RPC response could not be decoded: {exc}") from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"RPC request failed: {exc}") from exc

        return self._parse_response(body)

    @staticmethod
    def _parse_response(body: bytes) -> str:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RpcError("RPC response is not valid JSON") from exc

        if not isinstance(data, dict):
            raise RpcError("RPC response is not a JSON object")

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                code = error.get("code")
                raise RpcError(
                    str(error.get("message", "RPC error")),
                    code=code if isinstance(code, int) else None,
                )
            raise RpcError(str(error))

        result = data.get("result")
        if not isinstance(result, str):
            raise RpcError("RPC response has no transaction hash")
        return result
