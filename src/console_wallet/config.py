"""Configuration system for the console wallet backend.

Loads service config from a YAML file (default ``console-wallet.yaml``),
supports environment variable expansion, and falls back to built-in defaults
when no file exists.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")

CONFIG_ENV_VAR = "CONSOLE_WALLET_CONFIG"
DEFAULT_CONFIG_FILENAME = "console-wallet.yaml"

# Legacy values shared by every earlier deployment of the backend. Kept as
# defaults so existing players resolve to the same wallets.
LEGACY_NAMESPACE = "cryptoquest"
LEGACY_SALT = "polygon_salt"
LEGACY_VERSION_TAG = "2025"
MIN_KDF_ITERATIONS = 10_000


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    If the variable is not set the placeholder is left as-is. Fields that
    cannot tolerate a literal placeholder reject it during validation.
    """

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class ServerConfig(BaseModel):
    """HTTP listener settings."""

    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    level: str = "INFO"


class DerivationConfig(BaseModel):
    """Inputs to the deterministic wallet-address KDF.

    ``salt`` and ``namespace`` are the secrets every wallet depends on;
    set them per deployment (e.g. ``${CONSOLE_WALLET_SALT}``).
    """

    namespace: str = Field(default=LEGACY_NAMESPACE, min_length=1)
    salt: str = Field(default=LEGACY_SALT, min_length=1)
    version_tag: str = LEGACY_VERSION_TAG
    iterations: int = Field(default=MIN_KDF_ITERATIONS, ge=MIN_KDF_ITERATIONS)

    @field_validator("namespace", "salt")
    @classmethod
    def _reject_unexpanded(cls, value: str) -> str:
        # Every wallet address is derived from these values.
        match = _ENV_VAR_RE.search(value)
        if match:
            raise ValueError(
                f"environment variable {match.group(1)} is not set"
            )
        return value

    @property
    def uses_legacy_salt(self) -> bool:
        return self.salt == LEGACY_SALT


class KeyRefConfig(BaseModel):
    """Template for key references handed to the signing authority."""

    template: str = "arn:aws:kms:{region}:{account_id}:key/{namespace}_{platform}_{player_id}"
    region: str = "us-east-1"
    account_id: str = "123456789012"
    namespace: str = LEGACY_NAMESPACE

    @property
    def prefix(self) -> str:
        """The part of every key reference that precedes the identity."""
        return self.template.split("{platform}", 1)[0].format(
            region=self.region,
            account_id=self.account_id,
            namespace=self.namespace,
        )


class PlatformConfig(BaseModel):
    """Accepted console platforms. An empty list accepts any well-formed code."""

    allowed: list[str] = Field(default_factory=list)
    max_platform_length: int = 15
    max_player_id_length: int = 127


class RemoteSignerConfig(BaseModel):
    """HTTP signing authority reached by the ``remote`` backend."""

    url: str = ""
    api_token: str = ""              # ${SIGNER_API_TOKEN}


class KeystoreSignerConfig(BaseModel):
    """Encrypted keystore directory used by the ``keystore`` backend."""

    directory: str = "keystores"
    password: str = ""               # ${CONSOLE_WALLET_KEYSTORE_PASSWORD}


class SigningConfig(BaseModel):
    """Signer backend selection and limits."""

    backend: str = "stub"            # "stub", "remote" or "keystore"
    timeout_seconds: float = Field(default=10.0, gt=0)
    remote: RemoteSignerConfig = Field(default_factory=RemoteSignerConfig)
    keystore: KeystoreSignerConfig = Field(default_factory=KeystoreSignerConfig)


class RelayConfig(BaseModel):
    """Blockchain JSON-RPC endpoint used to broadcast signed transactions."""

    chain: str = "polygon"
    rpc_url: Optional[str] = None    # Overrides the chain's public RPC
    timeout_seconds: float = Field(default=30.0, gt=0)
    connect_timeout_seconds: float = Field(default=5.0, gt=0)
    request_id: int = 1


class TransactionConfig(BaseModel):
    """Settings for the submit-transaction endpoint."""

    key_platform: str = "console"    # Platform label used for signing keys


class ConsoleBackendConfig(BaseModel):
    """Root configuration object for the service."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    derivation: DerivationConfig = Field(default_factory=DerivationConfig)
    key_refs: KeyRefConfig = Field(default_factory=KeyRefConfig)
    platforms: PlatformConfig = Field(default_factory=PlatformConfig)
    signing: SigningConfig = Field(default_factory=SigningConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    transactions: TransactionConfig = Field(default_factory=TransactionConfig)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def resolve_config_path(path: Path | None = None) -> Path:
    """Return the config file location.

    Explicit *path* wins, then ``$CONSOLE_WALLET_CONFIG``, then
    ``console-wallet.yaml`` in the current working directory.
    """
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_config(path: Path) -> ConsoleBackendConfig:
    """Load and validate the service configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = path.read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    return ConsoleBackendConfig.model_validate(expanded)


def load_config_or_default(path: Path | None = None) -> ConsoleBackendConfig:
    """Load the config file if it exists, otherwise return the defaults."""
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return ConsoleBackendConfig()
    return load_config(config_path)


def save_config(config: ConsoleBackendConfig, path: Path) -> None:
    """Serialize a :class:`ConsoleBackendConfig` to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
