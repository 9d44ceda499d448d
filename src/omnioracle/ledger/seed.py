"""Demo seed data restored by a ledger reset."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from omnioracle.models import (
    ApiSource,
    HistoryEntry,
    Market,
    MarketStatus,
    OracleConfig,
    OracleStatus,
    Outcome,
    PoolBalance,
    UserProfile,
)


def seed_user(settings) -> UserProfile:
    return UserProfile(
        user_id=settings.user_id,
        username=settings.username,
        balance=settings.starting_balance,
        reputation=settings.starting_reputation,
        badges=("Early Adopter",),
    )


def seed_markets(now_ms: int | None = None) -> list[Market]:
    """Two demo markets: one open for trading, one waiting in the dispute window."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    btc = Market(
        market_id="m1",
        title="Will Bitcoin price exceed $100,000 by end of 2025?",
        description="Resolves YES if BTC/USD > 100k on Coingecko.",
        category="Crypto",
        end_date=datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        probabilities=(0.65, 0.35),
        volume=12500,
        liquidity=5000,
        pool_balance=PoolBalance(yes=3250, no=1750),
        oracle_config=OracleConfig(
            primary_source=ApiSource(
                id="o1",
                name="CoinGecko API",
                url="https://api.coingecko.com",
                status=OracleStatus.VERIFIED,
            ),
            resolution_criteria="Closing price UTC",
            dispute_window_hours=24,
        ),
        created_at=now_ms,
    )
    starship = Market(
        market_id="m2",
        title="Will SpaceX Starship reach orbit in Q2 2024?",
        description="Resolves YES if Starship completes one full orbit.",
        category="Tech",
        end_date=datetime(2024, 6, 30, 23, 59, 59, tzinfo=timezone.utc),
        status=MarketStatus.DISPUTE_WINDOW,
        probabilities=(0.85, 0.15),
        volume=50000,
        liquidity=10000,
        pool_balance=PoolBalance(yes=8500, no=1500),
        oracle_config=OracleConfig(
            primary_source=ApiSource(
                id="o2",
                name="SpaceX Official",
                status=OracleStatus.VERIFIED,
                reported_value=Outcome.YES,
            ),
            resolution_criteria="Official press release",
            dispute_window_hours=24,
        ),
        resolution_history=(
            HistoryEntry(step="LOCK", timestamp=now_ms - 100_000, details="Market closed"),
            HistoryEntry(step="ORACLE_FETCH", timestamp=now_ms - 50_000, details="Oracle returned YES"),
        ),
        resolution_attempt=1,
        created_at=now_ms,
    )
    return [btc, starship]
