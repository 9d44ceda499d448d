"""Markets subcommand: list, show, create."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import typer

from omnioracle.cli.session import market_line, open_ledger
from omnioracle.models import MarketDraft, draft_from_generated

app = typer.Typer(help="List, inspect and create markets")


@app.command("list")
def list_markets(
    ctx: typer.Context,
    status: str | None = typer.Option(None, "--status", "-s", help="Only markets in this status"),
) -> None:
    """List markets in the ledger, newest first."""
    with open_ledger(ctx) as store:
        rows = store.list_markets()
        if status:
            rows = [m for m in rows if m.status.value == status.upper()]
        for m in rows:
            typer.echo(market_line(m))
        typer.echo(f"Total: {len(rows)} markets")


@app.command("show")
def show(ctx: typer.Context, market_id: str = typer.Argument(..., help="Market ID")) -> None:
    """Show one market with its oracle configuration and resolution history."""
    with open_ledger(ctx) as store:
        m = store.get_market(market_id)
        typer.echo(market_line(m))
        typer.echo(f"  Liquidity: {m.liquidity:.2f}  Pool YES {m.pool_balance.yes:.2f} / NO {m.pool_balance.no:.2f}")
        typer.echo(f"  Ends: {m.end_date.isoformat()}  Category: {m.category}")
        typer.echo(f"  Criteria: {m.oracle_config.resolution_criteria}")
        for s in m.oracle_config.sources():
            value = f" -> {s.reported_value.value}" if s.reported_value else ""
            typer.echo(f"  Oracle: {s.name} [{s.type}] {s.status.value}{value}")
        if m.resolution_value:
            typer.echo(f"  Resolved: {m.resolution_value.value}")
        for entry in m.resolution_history:
            ts = datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc).isoformat(timespec="seconds")
            typer.echo(f"    {ts}  {entry.step:<13} {entry.details}")


@app.command("create")
def create(
    ctx: typer.Context,
    draft_file: Path = typer.Option(..., "--draft", "-d", exists=True, help="Market draft JSON file"),
    generated: bool = typer.Option(
        False, "--generated", help="Draft uses the generator's camelCase shape (initialProbability, oracleName...)"
    ),
) -> None:
    """Create a market from a draft JSON file."""
    data = json.loads(draft_file.read_text())
    try:
        draft = draft_from_generated(data) if generated else MarketDraft.model_validate(data)
    except ValueError as e:
        typer.echo(f"Invalid draft: {e}")
        raise typer.Exit(1) from e
    with open_ledger(ctx) as store:
        market = store.create_market(draft)
        typer.echo(f"Created market {market.market_id}")
        typer.echo(market_line(market))
