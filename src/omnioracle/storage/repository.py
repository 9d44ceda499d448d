"""Market, trade and session persistence.

Every write replaces whole records; ``commit`` applies a batch all-or-nothing.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

from omnioracle.models import Market, Trade, UserProfile

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

USER_KEY = "user"


class Repository(ABC):
    """Registry of markets, trades and the session profile."""

    @abstractmethod
    def get_market(self, market_id: str) -> Market | None: ...

    @abstractmethod
    def list_markets(self) -> list[Market]:
        """Markets, newest first."""
        ...

    @abstractmethod
    def list_trades(self, user_id: str | None = None) -> list[Trade]:
        """Trades, newest first, optionally for one user."""
        ...

    @abstractmethod
    def get_user(self) -> UserProfile | None: ...

    @abstractmethod
    def commit(
        self,
        markets: Iterable[Market] = (),
        trades: Iterable[Trade] = (),
        user: UserProfile | None = None,
    ) -> None:
        """Write a batch atomically. Trades are append-only; re-adding an id is an error."""
        ...

    @abstractmethod
    def clear(self) -> None: ...

    def close(self) -> None:
        pass


def _dedupe(markets: Iterable[Market]) -> list[Market]:
    """Last write per market_id wins within one batch."""
    return list({m.market_id: m for m in markets}.values())


class MemoryRepository(Repository):
    """Dict-backed registry for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._trades: dict[str, Trade] = {}
        self._user: UserProfile | None = None

    def get_market(self, market_id: str) -> Market | None:
        return self._markets.get(market_id)

    def list_markets(self) -> list[Market]:
        return list(reversed(self._markets.values()))

    def list_trades(self, user_id: str | None = None) -> list[Trade]:
        trades = reversed(self._trades.values())
        return [t for t in trades if user_id is None or t.user_id == user_id]

    def get_user(self) -> UserProfile | None:
        return self._user

    def commit(
        self,
        markets: Iterable[Market] = (),
        trades: Iterable[Trade] = (),
        user: UserProfile | None = None,
    ) -> None:
        new_markets = dict(self._markets)
        for m in _dedupe(markets):
            new_markets[m.market_id] = m
        new_trades = dict(self._trades)
        for t in trades:
            if t.trade_id in new_trades:
                raise ValueError(f"Trade already recorded: {t.trade_id}")
            new_trades[t.trade_id] = t
        self._markets = new_markets
        self._trades = new_trades
        if user is not None:
            self._user = user

    def clear(self) -> None:
        self._markets = {}
        self._trades = {}
        self._user = None


class DuckDBRepository(Repository):
    """DuckDB-backed registry. Expects ``init_schema`` to have run on the connection."""

    def __init__(self, conn: DuckDBPyConnection) -> None:
        self.conn = conn
        self._closed = False

    def get_market(self, market_id: str) -> Market | None:
        row = self.conn.execute(
            "SELECT payload FROM markets WHERE market_id = ?", [market_id]
        ).fetchone()
        return Market.model_validate_json(row[0]) if row else None

    def list_markets(self) -> list[Market]:
        rows = self.conn.execute("SELECT payload FROM markets ORDER BY seq DESC").fetchall()
        return [Market.model_validate_json(r[0]) for r in rows]

    def list_trades(self, user_id: str | None = None) -> list[Trade]:
        if user_id is None:
            rows = self.conn.execute("SELECT payload FROM trades ORDER BY seq DESC").fetchall()
        else:
            rows = self.conn.execute(
                "SELECT payload FROM trades WHERE user_id = ? ORDER BY seq DESC", [user_id]
            ).fetchall()
        return [Trade.model_validate_json(r[0]) for r in rows]

    def get_user(self) -> UserProfile | None:
        row = self.conn.execute("SELECT payload FROM session WHERE key = ?", [USER_KEY]).fetchone()
        return UserProfile.model_validate_json(row[0]) if row else None

    def commit(
        self,
        markets: Iterable[Market] = (),
        trades: Iterable[Trade] = (),
        user: UserProfile | None = None,
    ) -> None:
        now_ms = int(time.time() * 1000)
        self.conn.begin()
        try:
            for m in _dedupe(markets):
                self.conn.execute(
                    """
                    INSERT INTO markets (market_id, status, payload, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT (market_id) DO UPDATE SET
                        status = excluded.status,
                        payload = excluded.payload,
                        updated_at = excluded.updated_at
                    """,
                    [m.market_id, m.status.value, m.model_dump_json(), now_ms],
                )
            for t in trades:
                self.conn.execute(
                    """
                    INSERT INTO trades (trade_id, market_id, user_id, payload, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [t.trade_id, t.market_id, t.user_id, t.model_dump_json(), t.timestamp],
                )
            if user is not None:
                self.conn.execute(
                    """
                    INSERT INTO session (key, payload, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT (key) DO UPDATE SET
                        payload = excluded.payload,
                        updated_at = excluded.updated_at
                    """,
                    [USER_KEY, user.model_dump_json(), now_ms],
                )
        except Exception:
            self.conn.rollback()
            raise
        self.conn.commit()

    def clear(self) -> None:
        self.conn.execute("DELETE FROM trades")
        self.conn.execute("DELETE FROM markets")
        self.conn.execute("DELETE FROM session")

    def close(self) -> None:
        if not self._closed:
            self.conn.close()
            self._closed = True
