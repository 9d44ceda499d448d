"""Canonical enums shared by markets, trades and oracle sources."""

from __future__ import annotations

from enum import Enum


class Outcome(str, Enum):
    """Binary market outcome. Index 0 of a market's probabilities is YES."""

    YES = "YES"
    NO = "NO"

    @property
    def index(self) -> int:
        return 0 if self is Outcome.YES else 1


class MarketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"  # Trading stopped, waiting for settlement
    FETCHING_ORACLES = "FETCHING_ORACLES"
    DISPUTE_WINDOW = "DISPUTE_WINDOW"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (MarketStatus.RESOLVED, MarketStatus.CANCELLED)


class OracleStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    CONFLICT = "CONFLICT"
    REJECTED = "REJECTED"
