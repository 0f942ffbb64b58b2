"""Signing authority reached over HTTP.

Wire contract: ``POST <url>`` with ``{"keyReference": ..., "payload": ...}``;
a 2xx response carries ``{"signature": "0x..."}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from console_wallet.errors import SigningError, SigningErrorKind
from console_wallet.signing.base import Signer

if TYPE_CHECKING:
    from console_wallet.config import ConsoleBackendConfig

logger = logging.getLogger("console_wallet.signing.remote")

_STATUS_KINDS = {
    404: SigningErrorKind.INVALID_KEY_REFERENCE,
    400: SigningErrorKind.INVALID_PAYLOAD,
    422: SigningErrorKind.INVALID_PAYLOAD,
}


class RemoteSigner(Signer):
    """Delegates signing to a remote key-management service."""

    name = "remote"

    def __init__(
        self,
        url: str,
        timeout: float,
        api_token: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError(
                "Remote signer URL is empty. Set signing.remote.url in your "
                "configuration file."
            )
        self.url = url
        self.timeout = timeout
        self._api_token = api_token
        self._transport = transport

    @classmethod
    def from_config(cls, config: ConsoleBackendConfig) -> RemoteSigner:
        return cls(
            url=config.signing.remote.url,
            timeout=config.signing.timeout_seconds,
            api_token=config.signing.remote.api_token,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    async def sign(self, key_reference: str, payload: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.url,
                    json={"keyReference": key_reference, "payload": payload},
                    headers=self._headers(),
                )
        except httpx.RequestError as exc:
            raise SigningError(
                SigningErrorKind.AUTHORITY_UNREACHABLE,
                f"Signing authority unreachable: {exc}",
            ) from exc

        if resp.status_code in _STATUS_KINDS:
            raise SigningError(
                _STATUS_KINDS[resp.status_code],
                f"Signing authority rejected request (HTTP {resp.status_code})",
            )
        if not resp.is_success:
            raise SigningError(
                SigningErrorKind.AUTHORITY_UNREACHABLE,
                f"Signing authority returned HTTP {resp.status_code}",
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise SigningError(
                SigningErrorKind.AUTHORITY_UNREACHABLE,
                "Signing authority returned a non-JSON body",
            ) from exc

        signature = data.get("signature") if isinstance(data, dict) else None
        if not isinstance(signature, str) or not signature:
            raise SigningError(
                SigningErrorKind.AUTHORITY_UNREACHABLE,
                "Signing authority response has no signature",
            )
        return signature
