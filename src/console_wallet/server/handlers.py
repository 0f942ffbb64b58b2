"""Request handlers for the two console endpoints.

Handlers take the raw request body and return a :class:`HandlerResult`.
This is the only place where internal error kinds are mapped onto the
external response contract.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field

from console_wallet.config import ConsoleBackendConfig
from console_wallet.errors import NetworkError, ValidationError
from console_wallet.models import ConsoleAccount, PlayerIdentity, SignedTransaction
from console_wallet.signing.client import TransactionSignerClient
from console_wallet.wallet.derivation import derive_address
from console_wallet.wallet.key_refs import issue_key_reference
from console_wallet.wallet.relay import RelayClient

logger = logging.getLogger("console_wallet.server.handlers")

ERR_INVALID_JSON = "Invalid JSON"
ERR_MISSING_IDENTITY = "Missing platform or playerId"
ERR_MISSING_TX_FIELDS = "Missing required fields"
ERR_INVALID_PLATFORM = "Invalid platform"
ERR_INVALID_PLAYER_ID = "Invalid playerId"
ERR_TRANSACTION_FAILED = "Transaction failed"
ERR_NETWORK = "Network error"

STATUS_PENDING = "pending"

# No "_": it separates the identity fields in seeds and key references.
_PLATFORM_RE = re.compile(r"^[A-Za-z0-9-]+$")


@dataclass
class HandlerResult:
    status_code: int
    body: dict = field(default_factory=dict)


def _error(status_code: int, message: str) -> HandlerResult:
    return HandlerResult(status_code=status_code, body={"error": message})


def _parse_body(raw_body: bytes) -> object:
    try:
        return json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(ERR_INVALID_JSON) from exc


def _require_strings(data: object, names: tuple[str, ...], message: str) -> list[str]:
    """Return the named fields, or fail if any is absent, empty or not a string."""
    if not isinstance(data, dict):
        raise ValidationError(message)
    values = [data.get(name) for name in names]
    if not all(isinstance(v, str) and v for v in values):
        raise ValidationError(message)
    return values


class ConsoleHandlers:
    """Orchestrates derivation, signing and relay for one request at a time.

    Holds no per-request state; concurrent requests share only immutable
    configuration and the stateless clients.
    """

    def __init__(
        self,
        config: ConsoleBackendConfig,
        signer_client: TransactionSignerClient,
        relay_client: RelayClient,
    ) -> None:
        self.config = config
        self.signer_client = signer_client
        self.relay_client = relay_client

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_player_id(self, player_id: str) -> None:
        if len(player_id) > self.config.platforms.max_player_id_length:
            raise ValidationError(ERR_INVALID_PLAYER_ID)

    def _check_platform(self, platform: str) -> None:
        limits = self.config.platforms
        if len(platform) > limits.max_platform_length or not _PLATFORM_RE.match(platform):
            raise ValidationError(ERR_INVALID_PLATFORM)
        if limits.allowed and platform not in limits.allowed:
            raise ValidationError(ERR_INVALID_PLATFORM)

    # ------------------------------------------------------------------
    # POST /api/console-account
    # ------------------------------------------------------------------

    def create_account(self, raw_body: bytes) -> HandlerResult:
        """Derive the custodial wallet and key reference for a player."""
        try:
            data = _parse_body(raw_body)
            platform, player_id = _require_strings(
                data, ("platform", "playerId"), ERR_MISSING_IDENTITY
            )
            self._check_platform(platform)
            self._check_player_id(player_id)
        except ValidationError as exc:
            return _error(400, exc.message)

        identity = PlayerIdentity(platform=platform, player_id=player_id)
        account = ConsoleAccount(
            platform=identity.platform,
            player_id=identity.player_id,
            wallet_address=derive_address(
                identity.platform, identity.player_id, self.config.derivation
            ),
            kms_key_ref=issue_key_reference(
                identity.platform, identity.player_id, self.config.key_refs
            ),
            is_active=True,
        )
        logger.info(
            f"Console account resolved: {account.platform}/{account.player_id} "
            f"-> {account.wallet_address}"
        )
        return HandlerResult(status_code=200, body=account.to_response())

    # ------------------------------------------------------------------
    # POST /api/proxy-tx
    # ------------------------------------------------------------------

    async def submit_transaction(self, raw_body: bytes) -> HandlerResult:
        """Sign a contract call for a player and relay it to the chain.

        Signing must succeed before the relay is attempted; any failure
        produces an ``error`` body and never a transaction hash.
        """
        try:
            data = _parse_body(raw_body)
            player_id, contract_address, function_data = _require_strings(
                data,
                ("playerId", "contractAddress", "functionData"),
                ERR_MISSING_TX_FIELDS,
            )
            self._check_player_id(player_id)
        except ValidationError as exc:
            return _error(400, exc.message)

        key_reference = issue_key_reference(
            self.config.transactions.key_platform, player_id, self.config.key_refs
        )
        logger.info(f"Proxy transaction for {key_reference} to {contract_address}")

        signed = await self.signer_client.sign(key_reference, function_data)
        if not signed.ok:
            return _error(200, ERR_TRANSACTION_FAILED)

        relayed = await self.relay_client.relay(
            SignedTransaction(
                key_reference=key_reference,
                raw_transaction_payload=function_data,
                signature=signed.signature,
            )
        )
        if not relayed.ok:
            if isinstance(relayed.error, NetworkError):
                return _error(200, ERR_NETWORK)
            return _error(200, ERR_TRANSACTION_FAILED)

        return HandlerResult(
            status_code=200,
            body={"txHash": relayed.tx_hash, "status": STATUS_PENDING},
        )
