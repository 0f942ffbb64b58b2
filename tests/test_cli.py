"""
Tests for the typer CLI.
"""

from __future__ import annotations

from typer.testing import CliRunner

from console_wallet.cli.app import app
from console_wallet.config import ConsoleBackendConfig, load_config
from console_wallet.wallet.derivation import derive_address
from console_wallet.wallet.keystore import load_address

runner = CliRunner()


def test_derive_prints_library_address(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONSOLE_WALLET_CONFIG", raising=False)
    result = runner.invoke(app, ["derive", "xbox", "p123"])
    assert result.exit_code == 0, result.output
    expected = derive_address("xbox", "p123", ConsoleBackendConfig().derivation)
    assert expected in result.output


def test_init_config_writes_loadable_file(tmp_path, monkeypatch):
    monkeypatch.setenv("CONSOLE_WALLET_SALT", "deployment-salt")
    path = tmp_path / "console-wallet.yaml"
    result = runner.invoke(app, ["init-config", str(path)])
    assert result.exit_code == 0, result.output
    assert "${CONSOLE_WALLET_SALT}" in path.read_text(encoding="utf-8")
    cfg = load_config(path)
    assert cfg.derivation.salt == "deployment-salt"

    again = runner.invoke(app, ["init-config", str(path)])
    assert again.exit_code == 1


def test_unset_salt_fails_fast(tmp_path, monkeypatch):
    path = tmp_path / "console-wallet.yaml"
    runner.invoke(app, ["init-config", str(path)])
    monkeypatch.delenv("CONSOLE_WALLET_SALT", raising=False)
    result = runner.invoke(app, ["--config", str(path), "derive", "xbox", "p123"])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_chains_lists_polygon(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONSOLE_WALLET_CONFIG", raising=False)
    result = runner.invoke(app, ["chains"])
    assert result.exit_code == 0
    assert "polygon" in result.output


def test_keystore_create(tmp_path, monkeypatch):
    monkeypatch.delenv("CONSOLE_WALLET_CONFIG", raising=False)
    cfg = ConsoleBackendConfig()
    cfg.signing.keystore.directory = str(tmp_path / "keys")
    config_path = tmp_path / "console-wallet.yaml"
    from console_wallet.config import save_config

    save_config(cfg, config_path)
    result = runner.invoke(
        app, ["--config", str(config_path), "keystore", "create", "p123", "--password", "pw"]
    )
    assert result.exit_code == 0, result.output
    key_ref = "arn:aws:kms:us-east-1:123456789012:key/cryptoquest_console_p123"
    assert load_address(tmp_path / "keys", key_ref) is not None
