"""Maps signer backend names from config to concrete :class:`Signer` instances."""

from __future__ import annotations

import importlib
import logging

from console_wallet.config import ConsoleBackendConfig
from console_wallet.signing.base import Signer

logger = logging.getLogger(__name__)

# Registry of backend names -> implementation classes. Imports are deferred
# so that optional backends are only loaded when selected.
_SIGNER_FACTORIES: dict[str, str] = {
    "stub": "console_wallet.signing.stub.StubSigner",
    "remote": "console_wallet.signing.remote.RemoteSigner",
    "keystore": "console_wallet.signing.keystore.KeystoreSigner",
}


def _import_signer_class(dotted_path: str) -> type[Signer]:
    """Dynamically import a signer class from its fully-qualified path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    if not (isinstance(cls, type) and issubclass(cls, Signer)):
        raise TypeError(
            f"Expected a Signer subclass at '{dotted_path}', got {cls!r}"
        )
    return cls


def list_signer_backends() -> list[str]:
    return sorted(_SIGNER_FACTORIES.keys())


def build_signer(config: ConsoleBackendConfig) -> Signer:
    """Create the signer backend named by ``config.signing.backend``.

    Raises
    ------
    ValueError
        If the backend name is unknown or its settings are incomplete.
    """
    name = config.signing.backend
    if name not in _SIGNER_FACTORIES:
        raise ValueError(
            f"Unknown signer backend '{name}'. "
            f"Supported backends: {list_signer_backends()}"
        )

    signer_cls = _import_signer_class(_SIGNER_FACTORIES[name])
    signer = signer_cls.from_config(config)
    logger.info("Created %s signer backend", name)
    return signer
