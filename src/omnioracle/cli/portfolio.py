"""Portfolio subcommand: show."""

from __future__ import annotations

import typer

from omnioracle.cli.session import open_ledger

app = typer.Typer(help="Session balance and open positions")


@app.command("show")
def show(ctx: typer.Context) -> None:
    """Show balance, portfolio value and open positions marked at live probabilities."""
    with open_ledger(ctx) as store:
        user = store.user()
        positions = store.positions()
        typer.echo(f"User: {user.username} ({user.user_id})  Connected: {user.is_connected}")
        typer.echo(f"Balance: {user.balance:.2f}  Portfolio value: {user.portfolio_value:.2f}")
        for p in positions:
            typer.echo(
                f"  {p.market_id:<10} {p.outcome.value:<3} {p.shares:>10.2f} sh  "
                f"avg {p.avg_price:.4f}  mark {p.mark_price or 0:.4f}  PnL {p.unrealized_pnl:+.2f}"
            )
        typer.echo(f"Open positions: {len(positions)}")
