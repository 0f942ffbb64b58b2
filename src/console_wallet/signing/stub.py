"""Offline stand-in for the signing authority.

Produces the same mock signatures as the legacy console backend:
a fixed marker followed by the last 60 characters of the payload.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from console_wallet.errors import SigningError, SigningErrorKind
from console_wallet.signing.base import Signer, require_hex_payload

if TYPE_CHECKING:
    from console_wallet.config import ConsoleBackendConfig

STUB_SIGNATURE_MARKER = "0x1234567890abcdef"
_PAYLOAD_TAIL = 60


class StubSigner(Signer):
    name = "stub"

    def __init__(self, key_prefix: str = "") -> None:
        self.key_prefix = key_prefix

    @classmethod
    def from_config(cls, config: ConsoleBackendConfig) -> StubSigner:
        return cls(key_prefix=config.key_refs.prefix)

    async def sign(self, key_reference: str, payload: str) -> str:
        if not key_reference or not key_reference.startswith(self.key_prefix):
            raise SigningError(
                SigningErrorKind.INVALID_KEY_REFERENCE,
                f"Unknown key reference: {key_reference!r}",
            )
        require_hex_payload(payload)
        return STUB_SIGNATURE_MARKER + payload[-_PAYLOAD_TAIL:]
