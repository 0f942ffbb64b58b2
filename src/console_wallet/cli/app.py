"""CLI for the console wallet backend - run the server and inspect wallets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="console-wallet",
    help="Custodial wallets and transaction relay for console players.",
    no_args_is_help=True,
)
console = Console()

_config_path: Optional[Path] = None


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"console-wallet-backend {version('console-wallet-backend')}")
        raise typer.Exit()


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the YAML config file",
        envvar="CONSOLE_WALLET_CONFIG",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Custodial wallets and transaction relay for console players."""
    global _config_path
    _config_path = config


def _load_config():
    from pydantic import ValidationError

    from console_wallet.config import load_config_or_default

    try:
        return load_config_or_default(_config_path)
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red]\n{exc}")
        raise typer.Exit(1)


# ------------------------------------------------------------------
# Server
# ------------------------------------------------------------------


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (overrides config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (overrides config)"),
):
    """Start the HTTP backend."""
    from console_wallet.server.app import run_server

    config = _load_config()
    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    bind_host = host or config.server.host
    bind_port = port or config.server.port
    console.print(Panel(
        f"Listening on [cyan]http://{bind_host}:{bind_port}[/cyan]\n\n"
        f"  POST /api/console-account - Create custodial wallet\n"
        f"  POST /api/proxy-tx - Proxy blockchain transactions",
        title="Console Wallet Backend",
    ))
    try:
        run_server(config, host=bind_host, port=bind_port)
    except (KeyError, ValueError) as exc:
        console.print(f"[red]Failed to start:[/red] {exc}")
        raise typer.Exit(1)


# ------------------------------------------------------------------
# Wallet inspection
# ------------------------------------------------------------------


@app.command()
def derive(
    platform: str = typer.Argument(..., help="Console platform code, e.g. ps5 or xbox"),
    player_id: str = typer.Argument(..., help="Platform-assigned player ID"),
):
    """Show the wallet address and key reference for a player."""
    from web3 import Web3

    from console_wallet.wallet.derivation import derive_address
    from console_wallet.wallet.key_refs import issue_key_reference

    if not platform or not player_id:
        console.print("[red]Platform and player ID must be non-empty.[/red]")
        raise typer.Exit(1)

    config = _load_config()
    address = derive_address(platform, player_id, config.derivation)
    key_ref = issue_key_reference(platform, player_id, config.key_refs)

    table = Table(title=f"{platform} / {player_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("walletAddress", address)
    table.add_row("checksummed", Web3.to_checksum_address(address))
    table.add_row("kmsKeyRef", key_ref)
    console.print(table)


@app.command()
def chains():
    """List the chains the relay can target."""
    from console_wallet.wallet.chains import CHAINS

    config = _load_config()
    table = Table(title="Supported Chains")
    table.add_column("Chain", style="cyan")
    table.add_column("Chain ID", justify="right")
    table.add_column("RPC URL")
    for name, chain in CHAINS.items():
        marker = " [green](active)[/green]" if name == config.relay.chain else ""
        table.add_row(name + marker, str(chain.chain_id), chain.rpc_url)
    console.print(table)


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(Path("console-wallet.yaml"), help="Where to write the config"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write a config file populated with the defaults."""
    from console_wallet.config import ConsoleBackendConfig, save_config

    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)

    config = ConsoleBackendConfig()
    config.derivation.salt = "${CONSOLE_WALLET_SALT}"
    save_config(config, path)
    console.print(f"[green]Wrote config to[/green] {path}")
    console.print(
        "[dim]Set CONSOLE_WALLET_SALT before serving; the derivation salt "
        "determines every player's address.[/dim]"
    )


# ------------------------------------------------------------------
# keystore sub-commands
# ------------------------------------------------------------------

keystore_app = typer.Typer(
    name="keystore",
    help="Manage local keystores for the 'keystore' signer backend.",
    no_args_is_help=True,
)
app.add_typer(keystore_app, name="keystore")


@keystore_app.command("create")
def keystore_create(
    player_id: str = typer.Argument(..., help="Player ID to create a signing key for"),
    platform: Optional[str] = typer.Option(
        None, "--platform", help="Platform label (defaults to transactions.key_platform)"
    ),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        help="Keystore password (defaults to signing.keystore.password)",
        envvar="CONSOLE_WALLET_KEYSTORE_PASSWORD",
    ),
):
    """Generate an encrypted signing key for a player."""
    from console_wallet.wallet.key_refs import issue_key_reference
    from console_wallet.wallet.keystore import create_keystore

    config = _load_config()
    key_ref = issue_key_reference(
        platform or config.transactions.key_platform, player_id, config.key_refs
    )
    password = password or config.signing.keystore.password
    if not password:
        password = console.input("[bold]Set keystore password: [/bold]", password=True)

    try:
        addr = create_keystore(Path(config.signing.keystore.directory), key_ref, password)
    except FileExistsError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold green]Signing key created![/bold green]\n\n"
        f"Key reference: [cyan]{key_ref}[/cyan]\n"
        f"Signer address: [cyan]{addr}[/cyan]",
        title="Keystore",
    ))
