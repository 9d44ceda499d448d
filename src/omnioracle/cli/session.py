"""Open the configured ledger for one command."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from omnioracle.errors import OmniOracleError
from omnioracle.ledger import LedgerStore
from omnioracle.models import Market


@contextmanager
def open_ledger(ctx: typer.Context) -> Iterator[LedgerStore]:
    """Yield a LedgerStore; ledger errors print and exit 1."""
    settings = ctx.obj["settings"]
    try:
        store = LedgerStore.from_settings(settings)
    except RuntimeError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1) from e
    try:
        yield store
    except OmniOracleError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1) from e
    finally:
        store.close()


def market_line(m: Market) -> str:
    yes, no = m.probabilities
    return f"  {m.market_id:<10} {m.status.value:<16} YES {yes:.2%}  NO {no:.2%}  vol {m.volume:>10.2f}  {m.title[:50]}"
