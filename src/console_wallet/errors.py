"""Error types raised inside the wallet pipeline.

Clients convert these into :class:`~console_wallet.models.SignResult` and
:class:`~console_wallet.models.RelayResult` values; only the request
handlers turn them into HTTP responses.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class SigningErrorKind(str, Enum):
    AUTHORITY_UNREACHABLE = "authority_unreachable"
    INVALID_KEY_REFERENCE = "invalid_key_reference"
    INVALID_PAYLOAD = "invalid_payload"


class ConsoleWalletError(Exception):
    """Base class for all service errors."""


class ValidationError(ConsoleWalletError):
    """A request body is malformed or missing required fields."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SigningError(ConsoleWalletError):
    """The signing authority could not produce a signature."""

    def __init__(self, kind: SigningErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value


class RelayError(ConsoleWalletError):
    """Submitting a signed transaction to the RPC node failed."""


class NetworkError(RelayError):
    """Transport-level failure: DNS, connect, TLS, read or timeout."""


class RpcError(RelayError):
    """The node answered, but not with a transaction hash."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
