"""Pydantic models for the console wallet pipeline."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from console_wallet.errors import RelayError, SigningError


class PlayerIdentity(BaseModel):
    """A console player as identified by their platform."""

    model_config = ConfigDict(frozen=True)

    platform: str = Field(min_length=1)
    player_id: str = Field(min_length=1)


class ConsoleAccount(BaseModel):
    """Custodial account returned by the account-creation endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    platform: str
    player_id: str = Field(alias="playerId")
    wallet_address: str = Field(alias="walletAddress")
    kms_key_ref: str = Field(alias="kmsKeyRef")
    is_active: bool = Field(default=True, alias="isActive")

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)


class SignedTransaction(BaseModel):
    """A payload together with the signature the authority produced for it.

    Lives only for the duration of one relay call.
    """

    model_config = ConfigDict(frozen=True)

    key_reference: str
    raw_transaction_payload: str
    signature: str

    @property
    def raw_hex(self) -> str:
        """The signed encoding as ``0x``-prefixed hex for ``eth_sendRawTransaction``."""
        if self.signature.startswith(("0x", "0X")):
            return "0x" + self.signature[2:]
        return "0x" + self.signature


class SignResult(BaseModel):
    """Outcome of one signing attempt: a signature or a :class:`SigningError`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    signature: Optional[str] = None
    error: Optional[SigningError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.signature is not None


class RelayResult(BaseModel):
    """Outcome of one relay attempt: a transaction hash or a relay error."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tx_hash: Optional[str] = None
    error: Optional[RelayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.tx_hash is not None
