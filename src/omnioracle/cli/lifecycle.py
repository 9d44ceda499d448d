"""Lifecycle subcommand: lock, settle, resolve, cancel."""

from __future__ import annotations

import asyncio

import typer

from omnioracle.cli.session import market_line, open_ledger

app = typer.Typer(help="Drive a market through locking, oracle settlement and resolution")


@app.command("lock")
def lock(ctx: typer.Context, market_id: str = typer.Argument(..., help="Market ID")) -> None:
    """Stop trading on a market."""
    with open_ledger(ctx) as store:
        typer.echo(market_line(store.lock(market_id)))


@app.command("settle")
def settle(ctx: typer.Context, market_id: str = typer.Argument(..., help="Market ID")) -> None:
    """Query the market's oracle sources: resolve on agreement, else open the dispute window."""
    with open_ledger(ctx) as store:
        typer.echo("Fetching oracle...")
        market = asyncio.run(store.settle(market_id))
        if market is None:
            typer.echo(f"Market {market_id} was removed during settlement")
            raise typer.Exit(1)
        typer.echo(market_line(market))
        if market.resolution_history:
            typer.echo(f"  {market.resolution_history[-1].details}")


@app.command("resolve")
def resolve(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market ID"),
    outcome: str = typer.Argument(..., help="YES or NO"),
) -> None:
    """Manually resolve a market in the dispute window."""
    with open_ledger(ctx) as store:
        typer.echo(market_line(store.resolve(market_id, outcome)))


@app.command("cancel")
def cancel(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market ID"),
    reason: str = typer.Option("", "--reason", "-r", help="Recorded in the market history"),
) -> None:
    """Cancel a market that has not reached a terminal status."""
    with open_ledger(ctx) as store:
        typer.echo(market_line(store.cancel(market_id, reason)))
