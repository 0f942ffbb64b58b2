"""EVM networks the relay can broadcast to, keyed by name."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chain:
    name: str
    chain_id: int
    rpc_url: str


CHAINS: dict[str, Chain] = {
    chain.name: chain
    for chain in (
        Chain("polygon", 137, "https://polygon-rpc.com"),
        Chain("polygon-amoy", 80002, "https://rpc-amoy.polygon.technology"),
        Chain("ethereum", 1, "https://eth.llamarpc.com"),
        Chain("base", 8453, "https://mainnet.base.org"),
    )
}


def get_chain(name: str) -> Chain:
    """Look up a relay target. Raises ``KeyError`` for unknown names."""
    try:
        return CHAINS[name]
    except KeyError:
        raise KeyError(
            f"Unknown chain '{name}'. Available: {', '.join(CHAINS)}"
        ) from None
