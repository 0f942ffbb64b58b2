"""Signing backends and the client that bounds calls to them.

Backends implement :class:`Signer`; :func:`build_signer` picks one from the
``signing.backend`` config value.
"""

from console_wallet.signing.base import Signer
from console_wallet.signing.client import TransactionSignerClient
from console_wallet.signing.router import build_signer, list_signer_backends

__all__ = [
    "Signer",
    "TransactionSignerClient",
    "build_signer",
    "list_signer_backends",
]
