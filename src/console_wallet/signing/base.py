"""Signer capability shared by all signing backends."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from console_wallet.errors import SigningError, SigningErrorKind

if TYPE_CHECKING:
    from console_wallet.config import ConsoleBackendConfig

_HEX_RE = re.compile(r"^(0[xX])?[0-9a-fA-F]+$")


def require_hex_payload(payload: str) -> None:
    """Raise ``invalid_payload`` unless *payload* is non-empty hex."""
    if not isinstance(payload, str) or not _HEX_RE.match(payload):
        raise SigningError(
            SigningErrorKind.INVALID_PAYLOAD, "Payload must be hex-encoded"
        )


class Signer(ABC):
    """An external authority that holds private keys and signs on request.

    Implementations raise :class:`~console_wallet.errors.SigningError` with
    the matching kind when they cannot sign; they never expose key material.
    """

    name: str = "base"

    @classmethod
    @abstractmethod
    def from_config(cls, config: ConsoleBackendConfig) -> Signer:
        """Build the backend from the service configuration."""

    @abstractmethod
    async def sign(self, key_reference: str, payload: str) -> str:
        """Sign *payload* with the key named by *key_reference*.

        Returns the signed encoding as a hex string.
        """
