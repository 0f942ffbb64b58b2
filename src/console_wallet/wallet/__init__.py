"""Custodial wallet derivation, key references and transaction relay.

Addresses and key references are pure functions of a player's platform
identity and never stored; signed transactions are broadcast through an
EVM JSON-RPC node (Polygon by default).
"""
