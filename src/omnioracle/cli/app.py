"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from omnioracle.config import configure_logging, get_settings

app = typer.Typer(
    name="omni",
    help="OmniOracle - Prediction market ledger, AMM trading, and oracle settlement.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
    db_path: str | None = typer.Option(None, "--db", help="Ledger database path (overrides config)"),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    if db_path:
        settings.storage["db_path"] = db_path
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from omnioracle.cli import api_cmd, ledger, lifecycle, markets, portfolio, trade  # noqa: E402

app.add_typer(markets.app, name="markets")
app.add_typer(trade.app, name="trade")
app.add_typer(lifecycle.app, name="lifecycle")
app.add_typer(portfolio.app, name="portfolio")
app.add_typer(ledger.app, name="ledger")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
