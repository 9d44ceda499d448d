"""CLI smoke tests against a temporary ledger file."""

import json

import pytest
from typer.testing import CliRunner

from omnioracle.cli.app import app
from omnioracle.storage import get_connection, init_schema

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path):
    d = tmp_path / "config"
    d.mkdir()
    (d / "default.toml").write_text('[logging]\nlevel = "ERROR"\n')
    return d


@pytest.fixture
def db(temp_db_path, config_dir):
    """Ledger path paired with a quiet config so command output is just the echo lines."""
    return temp_db_path, config_dir


def _invoke(db, *args):
    path, config_dir = db
    return runner.invoke(app, ["-C", str(config_dir), "--db", str(path), *args])


def test_list_trade_and_portfolio(db):
    result = _invoke(db, "markets", "list")
    assert result.exit_code == 0, result.output
    assert "m1" in result.output
    assert "Total: 2 markets" in result.output

    result = _invoke(db, "trade", "buy", "m1", "YES", "500")
    assert result.exit_code == 0, result.output
    assert "Balance: 2000.00" in result.output

    result = _invoke(db, "portfolio", "show")
    assert result.exit_code == 0, result.output
    assert "Open positions: 1" in result.output


def test_rejection_exits_nonzero(db):
    result = _invoke(db, "trade", "buy", "m2", "YES", "5")
    assert result.exit_code == 1
    assert "not accepting trades" in result.output
    result = _invoke(db, "markets", "show", "nope")
    assert result.exit_code == 1


def test_lifecycle_commands(db):
    assert _invoke(db, "lifecycle", "resolve", "m2", "NO").exit_code == 0
    result = _invoke(db, "markets", "show", "m2")
    assert "Resolved: NO" in result.output
    assert _invoke(db, "lifecycle", "lock", "m1").exit_code == 0
    result = _invoke(db, "lifecycle", "cancel", "m1", "--reason", "test")
    assert result.exit_code == 0
    assert "CANCELLED" in result.output
    result = _invoke(db, "ledger", "reset", "--yes")
    assert "2 seed markets" in result.output


def test_create_from_generated_draft(db, tmp_path):
    draft = {
        "title": "Will the new stadium open on time?",
        "description": "Opening ceremony before the season",
        "category": "Sports",
        "endDate": "2031-08-01T00:00:00Z",
        "initialProbability": 0.35,
        "resolutionCriteria": "Club announcement",
        "oracleName": "Club press office",
        "oracleUrl": "https://club.example/news",
    }
    path = tmp_path / "draft.json"
    path.write_text(json.dumps(draft))
    result = _invoke(db, "markets", "create", "--draft", str(path), "--generated")
    assert result.exit_code == 0, result.output
    assert "Created market" in result.output
    result = _invoke(db, "markets", "list")
    assert "Total: 3 markets" in result.output


def test_unsupported_schema_version_is_reported(db):
    path, _ = db
    conn = get_connection(path)
    init_schema(conn)
    conn.execute("UPDATE schema_meta SET value = '99' WHERE key = 'schema_version'")
    conn.close()
    result = _invoke(db, "markets", "list")
    assert result.exit_code == 1
    assert "Error: Database schema version 99 is not supported" in result.output
