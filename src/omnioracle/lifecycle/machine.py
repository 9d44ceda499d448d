"""Market status state machine.

ACTIVE -> LOCKED -> FETCHING_ORACLES -> DISPUTE_WINDOW | RESOLVED, and
DISPUTE_WINDOW -> RESOLVED. Any non-terminal status may be CANCELLED.
Every transition returns a new market record with exactly one history entry
appended; RESOLVED and CANCELLED accept nothing further.
"""

from __future__ import annotations

import time
import uuid

import structlog

from omnioracle.errors import ValidationError
from omnioracle.models import HistoryEntry, Market, MarketStatus, Outcome
from omnioracle.oracle.anomaly import OracleOutcome

log = structlog.get_logger(__name__)

TRANSITIONS: dict[MarketStatus, frozenset[MarketStatus]] = {
    MarketStatus.ACTIVE: frozenset({MarketStatus.LOCKED, MarketStatus.CANCELLED}),
    MarketStatus.LOCKED: frozenset({MarketStatus.FETCHING_ORACLES, MarketStatus.CANCELLED}),
    MarketStatus.FETCHING_ORACLES: frozenset(
        {MarketStatus.DISPUTE_WINDOW, MarketStatus.RESOLVED, MarketStatus.CANCELLED}
    ),
    MarketStatus.DISPUTE_WINDOW: frozenset({MarketStatus.RESOLVED, MarketStatus.CANCELLED}),
    MarketStatus.RESOLVED: frozenset(),
    MarketStatus.CANCELLED: frozenset(),
}

# History step label per target status
STEP_LABELS: dict[MarketStatus, str] = {
    MarketStatus.LOCKED: "LOCK",
    MarketStatus.FETCHING_ORACLES: "ORACLE_FETCH",
    MarketStatus.DISPUTE_WINDOW: "DISPUTE",
    MarketStatus.RESOLVED: "RESOLVED",
    MarketStatus.CANCELLED: "CANCELLED",
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def can_transition(current: MarketStatus, target: MarketStatus) -> bool:
    return target in TRANSITIONS[current]


def _move(
    market: Market,
    target: MarketStatus,
    details: str,
    now: int | None = None,
    **update,
) -> Market:
    if not can_transition(market.status, target):
        raise ValidationError(
            f"Illegal transition {market.status.value} -> {target.value} for market {market.market_id}",
            code="illegal_transition",
        )
    timestamp = now if now is not None else _now_ms()
    entry = HistoryEntry(step=STEP_LABELS[target], timestamp=timestamp, details=details)
    # model_copy skips validation; rebuild so terminal-state rules are checked
    data = market.model_dump()
    data.update(update)
    data["status"] = target
    data["resolution_history"] = [*market.resolution_history, entry]
    moved = Market.model_validate(data)
    log.info(
        "market_transition",
        market_id=market.market_id,
        from_status=market.status.value,
        to_status=target.value,
        details=details,
    )
    return moved


def lock(market: Market, now: int | None = None) -> Market:
    """Stop trading (end of trading period or administrative close)."""
    return _move(market, MarketStatus.LOCKED, "Market closed", now)


def begin_oracle_fetch(market: Market, now: int | None = None) -> Market:
    """Enter FETCHING_ORACLES, starting a new resolution attempt.

    Sources are reset to PENDING, ``resolution_attempt`` is bumped and a fresh
    ``attempt_id`` is issued; only a result carrying that id may settle the market.
    Ids never repeat, so a market rebuilt by a reset cannot accept an old result.
    """
    attempt = market.resolution_attempt + 1
    cfg = market.oracle_config
    oracle_config = cfg.model_copy(
        update={
            "primary_source": cfg.primary_source.pending(),
            "backup_sources": tuple(s.pending() for s in cfg.backup_sources),
        }
    )
    names = ", ".join(s.name for s in cfg.sources())
    return _move(
        market,
        MarketStatus.FETCHING_ORACLES,
        f"Attempt {attempt}: querying {names}",
        now,
        resolution_attempt=attempt,
        attempt_id=uuid.uuid4().hex,
        oracle_config=oracle_config,
    )


def apply_oracle_result(
    market: Market,
    attempt_id: str,
    outcome: OracleOutcome,
    now: int | None = None,
) -> Market | None:
    """Settle an attempt from its oracle verdict. Returns None for stale results.

    A result is stale when the market has left FETCHING_ORACLES or its
    ``attempt_id`` differs from the one the fetch was issued under.
    """
    if market.status != MarketStatus.FETCHING_ORACLES or market.attempt_id != attempt_id:
        log.warning(
            "stale_oracle_result_discarded",
            market_id=market.market_id,
            status=market.status.value,
            attempt_id=attempt_id,
            current_attempt_id=market.attempt_id,
        )
        return None
    primary, *backups = outcome.sources or (market.oracle_config.primary_source,)
    oracle_config = market.oracle_config.model_copy(
        update={"primary_source": primary, "backup_sources": tuple(backups)}
    )
    if outcome.resolved_value is not None:
        return _move(
            market,
            MarketStatus.RESOLVED,
            outcome.reason,
            now,
            oracle_config=oracle_config,
            resolution_value=outcome.resolved_value,
        )
    return _move(market, MarketStatus.DISPUTE_WINDOW, outcome.reason, now, oracle_config=oracle_config)


def resolve(market: Market, outcome: Outcome, now: int | None = None) -> Market:
    """Manual adjudication out of the dispute window."""
    if market.status != MarketStatus.DISPUTE_WINDOW:
        raise ValidationError(
            f"Market {market.market_id} is {market.status.value}; manual resolution requires DISPUTE_WINDOW",
            code="illegal_transition",
        )
    return _move(
        market,
        MarketStatus.RESOLVED,
        f"Market resolved to {outcome.value}",
        now,
        resolution_value=outcome,
    )


def cancel(market: Market, reason: str = "", now: int | None = None) -> Market:
    """Administrative escape hatch from any non-terminal status."""
    return _move(market, MarketStatus.CANCELLED, reason or "Market cancelled", now)


def transition(market: Market, target: MarketStatus, now: int | None = None) -> Market:
    """Generic status change for the statuses that need no extra input.

    FETCHING_ORACLES is entered through settlement (which issues the oracle
    call) and RESOLVED needs an outcome, so both are refused here.
    """
    if target == MarketStatus.LOCKED:
        return lock(market, now)
    if target == MarketStatus.DISPUTE_WINDOW:
        return _move(market, target, "Awaiting manual resolution", now)
    if target == MarketStatus.CANCELLED:
        return cancel(market, now=now)
    raise ValidationError(
        f"Status {target.value} cannot be set directly",
        code="illegal_transition",
    )
