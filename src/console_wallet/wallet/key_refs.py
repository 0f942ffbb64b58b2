"""Key references naming a player's key in the external signing authority."""

from __future__ import annotations

from console_wallet.config import KeyRefConfig


def issue_key_reference(platform: str, player_id: str, config: KeyRefConfig) -> str:
    """Build the key reference for a player.

    Nothing is created in the signing authority; the reference is assumed
    to resolve to an existing or lazily-created key there.
    """
    return config.template.format(
        region=config.region,
        account_id=config.account_id,
        namespace=config.namespace,
        platform=platform,
        player_id=player_id,
    )
