"""Signer backed by encrypted eth-account keystores on local disk.

Meant for development and staging: each key reference needs a keystore
created with ``console-wallet keystore create``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from console_wallet.errors import SigningError, SigningErrorKind
from console_wallet.signing.base import Signer, require_hex_payload
from console_wallet.wallet.keystore import decrypt_key

if TYPE_CHECKING:
    from console_wallet.config import ConsoleBackendConfig


class KeystoreSigner(Signer):
    name = "keystore"

    def __init__(self, directory: Path, password: str) -> None:
        self.directory = Path(directory)
        self._password = password

    @classmethod
    def from_config(cls, config: ConsoleBackendConfig) -> KeystoreSigner:
        return cls(
            directory=Path(config.signing.keystore.directory),
            password=config.signing.keystore.password,
        )

    def _sign_blocking(self, key_reference: str, payload: str) -> str:
        try:
            private_key = decrypt_key(self.directory, key_reference, self._password)
        except (FileNotFoundError, ValueError) as exc:
            raise SigningError(
                SigningErrorKind.INVALID_KEY_REFERENCE, str(exc)
            ) from exc

        message = encode_defunct(hexstr=payload)
        signed = Account.sign_message(message, private_key=private_key)
        return Web3.to_hex(signed.signature)

    async def sign(self, key_reference: str, payload: str) -> str:
        require_hex_payload(payload)
        # Keystore decryption is scrypt-bound; keep it off the event loop.
        return await asyncio.to_thread(self._sign_blocking, key_reference, payload)
