"""Encrypted per-key keystore files using eth-account.

Each key reference maps to one ``<sanitized reference>.json`` file inside a
keystore directory. Used by the ``keystore`` signer backend and the
``keystore create`` CLI command.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from eth_account import Account
from web3 import Web3

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")


def keystore_path(directory: Path, key_reference: str) -> Path:
    """Return the keystore file that backs *key_reference*."""
    return Path(directory) / (_UNSAFE_CHARS_RE.sub("_", key_reference) + ".json")


def create_keystore(directory: Path, key_reference: str, password: str) -> str:
    """Generate a new keypair for *key_reference* and save it encrypted.

    Returns
    -------
    str
        The checksummed address of the new key.

    Raises
    ------
    FileExistsError
        If a keystore for this key reference already exists.
    """
    path = keystore_path(directory, key_reference)
    if path.exists():
        raise FileExistsError(
            f"Keystore already exists at {path}. "
            "Delete it first if you want to replace the key."
        )

    acct = Account.create()
    encrypted = Account.encrypt(acct.key, password)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(encrypted, indent=2), encoding="utf-8")

    return acct.address


def load_address(directory: Path, key_reference: str) -> str | None:
    """Read the key's address without decrypting. ``None`` if no keystore exists."""
    path = keystore_path(directory, key_reference)
    if not path.exists():
        return None

    data = json.loads(path.read_text(encoding="utf-8"))
    raw_address = data.get("address", "")
    if not raw_address.startswith("0x"):
        raw_address = "0x" + raw_address
    return Web3.to_checksum_address(raw_address)


def decrypt_key(directory: Path, key_reference: str, password: str) -> bytes:
    """Decrypt the private key stored for *key_reference*.

    Raises
    ------
    FileNotFoundError
        If no keystore file exists.
    ValueError
        If the password is incorrect or the file is not a keystore.
    """
    path = keystore_path(directory, key_reference)
    if not path.exists():
        raise FileNotFoundError(f"No keystore found at {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Account.decrypt(data, password)
    except Exception as exc:
        raise ValueError(f"Failed to decrypt keystore: {exc}") from exc
