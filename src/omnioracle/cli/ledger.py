"""Ledger subcommand: reset, connect."""

from __future__ import annotations

import typer

from omnioracle.cli.session import open_ledger

app = typer.Typer(help="Ledger administration")


@app.command("reset")
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete all markets and trades and restore the seed session."""
    if not yes:
        typer.confirm("Reset the ledger? All markets and trades will be lost.", abort=True)
    with open_ledger(ctx) as store:
        store.reset()
        typer.echo(f"Ledger reset. {len(store.list_markets())} seed markets.")


@app.command("connect")
def connect(ctx: typer.Context, wallet_address: str = typer.Argument(..., help="Wallet address")) -> None:
    """Connect the session profile to a wallet address."""
    with open_ledger(ctx) as store:
        user = store.connect(wallet_address)
        typer.echo(f"Connected {user.username} to {user.wallet_address}")
