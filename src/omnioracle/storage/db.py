"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Sequences preserve insertion order for listings
CREATE SEQUENCE IF NOT EXISTS market_seq START 1;
CREATE SEQUENCE IF NOT EXISTS trade_seq START 1;

-- Schema bookkeeping
CREATE TABLE IF NOT EXISTS schema_meta (
    key             VARCHAR PRIMARY KEY,
    value           VARCHAR NOT NULL
);

-- Markets: one full JSON record per market, replaced wholesale on every write
CREATE TABLE IF NOT EXISTS markets (
    market_id       VARCHAR PRIMARY KEY,
    seq             BIGINT DEFAULT nextval('market_seq'),
    status          VARCHAR NOT NULL,
    payload         JSON NOT NULL,
    updated_at      BIGINT NOT NULL
);

-- Trades (append-only)
CREATE TABLE IF NOT EXISTS trades (
    trade_id        VARCHAR PRIMARY KEY,
    seq             BIGINT DEFAULT nextval('trade_seq'),
    market_id       VARCHAR NOT NULL,
    user_id         VARCHAR NOT NULL,
    payload         JSON NOT NULL,
    created_at      BIGINT NOT NULL
);

-- Session singleton(s), e.g. the connected user profile
CREATE TABLE IF NOT EXISTS session (
    key             VARCHAR PRIMARY KEY,
    payload         JSON NOT NULL,
    updated_at      BIGINT NOT NULL
)
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    ``:memory:`` gives a throwaway in-process database."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist, and stamp the schema version."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
    version = get_schema_version(conn)
    if version is None:
        conn.execute(
            "INSERT INTO schema_meta (key, value) VALUES ('schema_version', ?)",
            [str(SCHEMA_VERSION)],
        )
    elif version != SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {version} is not supported (expected {SCHEMA_VERSION})"
        )


def get_schema_version(conn: DuckDBPyConnection) -> int | None:
    row = conn.execute("SELECT value FROM schema_meta WHERE key = 'schema_version'").fetchone()
    return int(row[0]) if row else None
