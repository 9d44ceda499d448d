"""Trade subcommand: buy."""

from __future__ import annotations

import typer

from omnioracle.cli.session import open_ledger

app = typer.Typer(help="Trade against the market maker")


@app.command("buy")
def buy(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market ID"),
    outcome: str = typer.Argument(..., help="YES or NO"),
    amount: float = typer.Argument(..., help="Notional to spend"),
) -> None:
    """Buy shares of an outcome."""
    with open_ledger(ctx) as store:
        receipt = store.trade(market_id, outcome, amount)
        yes, no = receipt.market.probabilities
        typer.echo(f"Bought {receipt.shares:.2f} {receipt.trade.outcome.value} shares @ {receipt.price:.4f}")
        typer.echo(f"Market now YES {yes:.2%} / NO {no:.2%}  Balance: {receipt.balance:.2f}")
