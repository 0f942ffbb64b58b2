"""Deterministic custodial wallet addresses.

A player's address is recomputed from their platform identity on every
request instead of being looked up, so the same ``(platform, player_id)``
must always map to the same address for a given :class:`DerivationConfig`.
"""

from __future__ import annotations

import hashlib

from console_wallet.config import DerivationConfig

ADDRESS_PREFIX = "0x"
ADDRESS_BYTES = 20
_DIGEST_BYTES = 32


def build_seed(platform: str, player_id: str, config: DerivationConfig) -> str:
    return f"{config.namespace}_{platform}_{player_id}_{config.version_tag}"


def derive_address(platform: str, player_id: str, config: DerivationConfig) -> str:
    """Derive the wallet address for a player.

    PBKDF2-HMAC-SHA256 over the seed with the configured salt and iteration
    count; the low 20 bytes of the 32-byte digest become the address.

    Inputs are not validated here. Callers must reject empty identities
    first, because an empty identity still derives a (shared) address.

    Returns
    -------
    str
        ``0x`` followed by 40 lowercase hex characters.
    """
    seed = build_seed(platform, player_id, config)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        seed.encode("utf-8"),
        config.salt.encode("utf-8"),
        config.iterations,
        dklen=_DIGEST_BYTES,
    )
    return ADDRESS_PREFIX + digest[-ADDRESS_BYTES:].hex()
