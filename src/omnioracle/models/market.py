"""Market, OracleConfig, PoolBalance, HistoryEntry - canonical entities."""

from __future__ import annotations

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from omnioracle.models.enums import MarketStatus, Outcome
from omnioracle.models.oracle import OracleSource

PROBABILITY_TOLERANCE = 1e-9
MIN_PROBABILITY = 0.01
MAX_PROBABILITY = 0.99


class HistoryEntry(BaseModel):
    """One immutable step of a market's resolution audit trail."""

    model_config = ConfigDict(frozen=True)

    step: str
    timestamp: int  # ms epoch
    details: str = ""


class PoolBalance(BaseModel):
    """Notional allocated to each outcome side."""

    model_config = ConfigDict(frozen=True)

    yes: float = Field(0.0, ge=0)
    no: float = Field(0.0, ge=0)

    @classmethod
    def seeded(cls, liquidity: float, yes_probability: float) -> PoolBalance:
        return cls(yes=liquidity * yes_probability, no=liquidity * (1 - yes_probability))

    def credit(self, outcome: Outcome, amount: float) -> PoolBalance:
        if outcome is Outcome.YES:
            return PoolBalance(yes=self.yes + amount, no=self.no)
        return PoolBalance(yes=self.yes, no=self.no + amount)


class OracleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary_source: OracleSource
    backup_sources: tuple[OracleSource, ...] = ()
    resolution_criteria: str = Field(..., min_length=1)
    dispute_window_hours: int = Field(24, ge=0)  # informational; no timeout is enforced

    def sources(self) -> list[OracleSource]:
        return [self.primary_source, *self.backup_sources]


class Market(BaseModel):
    """Binary prediction market with AMM state and resolution trail."""

    model_config = ConfigDict(frozen=True)

    market_id: str
    title: str
    description: str = ""
    category: str = "General"
    end_date: datetime
    status: MarketStatus = MarketStatus.ACTIVE
    outcomes: tuple[Outcome, Outcome] = (Outcome.YES, Outcome.NO)
    probabilities: tuple[float, float]
    volume: float = Field(0.0, ge=0)
    liquidity: float = Field(..., gt=0)
    pool_balance: PoolBalance
    oracle_config: OracleConfig
    resolution_value: Outcome | None = None
    resolution_history: tuple[HistoryEntry, ...] = ()
    resolution_attempt: int = 0  # bumped each time the market enters FETCHING_ORACLES
    attempt_id: str | None = None  # unique per attempt; oracle results must carry it
    creator_id: str = "system"
    created_at: int | None = None  # ms epoch

    @field_validator("outcomes")
    @classmethod
    def _binary_outcomes(cls, v: tuple[Outcome, Outcome]) -> tuple[Outcome, Outcome]:
        if v != (Outcome.YES, Outcome.NO):
            raise ValueError("outcomes must be (YES, NO)")
        return v

    @field_validator("probabilities")
    @classmethod
    def _probabilities_valid(cls, v: tuple[float, float]) -> tuple[float, float]:
        if not probabilities_valid(v, MIN_PROBABILITY, MAX_PROBABILITY):
            raise ValueError(
                f"probabilities must lie in [{MIN_PROBABILITY}, {MAX_PROBABILITY}] and sum to 1, got {v}"
            )
        return v

    @model_validator(mode="after")
    def _resolution_value_only_when_resolved(self):
        if self.resolution_value is not None and self.status != MarketStatus.RESOLVED:
            raise ValueError("resolution_value is only set on RESOLVED markets")
        if self.status == MarketStatus.RESOLVED and self.resolution_value is None:
            raise ValueError("RESOLVED markets require a resolution_value")
        return self

    @property
    def yes_probability(self) -> float:
        return self.probabilities[0]

    def probability(self, outcome: Outcome) -> float:
        return self.probabilities[outcome.index]

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def accepts_trades(self) -> bool:
        return self.status == MarketStatus.ACTIVE


def probabilities_valid(
    probabilities: tuple[float, float] | list[float],
    low: float = 0.0,
    high: float = 1.0,
) -> bool:
    """True if both values are finite, within [low, high], and sum to 1."""
    if len(probabilities) != 2:
        return False
    yes, no = probabilities
    if not (math.isfinite(yes) and math.isfinite(no)):
        return False
    tol = PROBABILITY_TOLERANCE
    if not (low - tol <= yes <= high + tol and low - tol <= no <= high + tol):
        return False
    return abs(yes + no - 1.0) <= tol
