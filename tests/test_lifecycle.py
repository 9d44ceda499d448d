"""Market lifecycle state machine tests."""

import pytest

from omnioracle import lifecycle
from omnioracle.errors import ValidationError
from omnioracle.models import ApiSource, MarketStatus, OracleStatus, Outcome
from omnioracle.oracle import OracleOutcome, evaluate_sources

from conftest import make_market


def _fetching(market=None):
    market = market or make_market()
    return lifecycle.begin_oracle_fetch(lifecycle.lock(market, now=1), now=2)


def _verdict(market, status, value=None):
    source = market.oracle_config.primary_source.with_result(status, value, timestamp=3)
    return evaluate_sources([source])


def _settle(fetching, status, value=None):
    return lifecycle.apply_oracle_result(fetching, fetching.attempt_id, _verdict(fetching, status, value))


def test_happy_path_appends_one_entry_per_transition():
    market = make_market()
    locked = lifecycle.lock(market, now=10)
    assert locked.status == MarketStatus.LOCKED
    assert [e.step for e in locked.resolution_history] == ["LOCK"]
    fetching = lifecycle.begin_oracle_fetch(locked, now=20)
    assert fetching.status == MarketStatus.FETCHING_ORACLES
    assert fetching.resolution_attempt == 1
    assert len(fetching.resolution_history) == 2
    assert fetching.resolution_history[0] == locked.resolution_history[0]


def test_verified_result_resolves_directly():
    fetching = _fetching()
    resolved = _settle(fetching, OracleStatus.VERIFIED, Outcome.YES)
    assert resolved.status == MarketStatus.RESOLVED
    assert resolved.resolution_value == Outcome.YES
    assert len(resolved.resolution_history) == len(fetching.resolution_history) + 1
    assert resolved.oracle_config.primary_source.status == OracleStatus.VERIFIED


def test_conflict_routes_to_dispute_window():
    fetching = _fetching()
    disputed = _settle(fetching, OracleStatus.CONFLICT)
    assert disputed.status == MarketStatus.DISPUTE_WINDOW
    assert disputed.resolution_value is None
    assert len(disputed.resolution_history) == len(fetching.resolution_history) + 1
    assert disputed.resolution_history[-1].step == "DISPUTE"


@pytest.mark.parametrize("status", [OracleStatus.REJECTED, OracleStatus.VERIFIED])
def test_rejected_or_valueless_verified_goes_to_dispute(status):
    fetching = _fetching()
    disputed = _settle(fetching, status)
    assert disputed.status == MarketStatus.DISPUTE_WINDOW


def test_stale_attempt_is_discarded():
    fetching = _fetching()
    verdict = _verdict(fetching, OracleStatus.VERIFIED, Outcome.NO)
    assert lifecycle.apply_oracle_result(fetching, "previous-attempt", verdict) is None


def test_result_after_market_left_fetching_is_discarded():
    fetching = _fetching()
    resolved = _settle(fetching, OracleStatus.VERIFIED, Outcome.YES)
    late = _verdict(fetching, OracleStatus.VERIFIED, Outcome.NO)
    again = lifecycle.apply_oracle_result(resolved, fetching.attempt_id, late)
    assert again is None
    cancelled = lifecycle.cancel(_fetching(), "halted")
    verdict = _verdict(cancelled, OracleStatus.CONFLICT)
    assert lifecycle.apply_oracle_result(cancelled, cancelled.attempt_id, verdict) is None


def test_manual_resolution_only_from_dispute_window():
    fetching = _fetching()
    disputed = _settle(fetching, OracleStatus.CONFLICT)
    resolved = lifecycle.resolve(disputed, Outcome.NO)
    assert resolved.status == MarketStatus.RESOLVED
    assert resolved.resolution_value == Outcome.NO
    with pytest.raises(ValidationError):
        lifecycle.resolve(make_market(), Outcome.YES)


def test_terminal_states_reject_everything():
    cancelled = lifecycle.cancel(make_market(), "duplicate")
    assert cancelled.resolution_history[-1].details == "duplicate"
    for op in (lifecycle.lock, lifecycle.begin_oracle_fetch, lambda m: lifecycle.cancel(m)):
        with pytest.raises(ValidationError):
            op(cancelled)
    with pytest.raises(ValidationError):
        lifecycle.resolve(cancelled, Outcome.YES)


def test_cannot_skip_lock():
    with pytest.raises(ValidationError) as exc:
        lifecycle.begin_oracle_fetch(make_market())
    assert exc.value.code == "illegal_transition"


def test_generic_transition_refuses_fetching_and_resolved():
    locked = lifecycle.lock(make_market())
    for target in (MarketStatus.FETCHING_ORACLES, MarketStatus.RESOLVED, MarketStatus.ACTIVE):
        with pytest.raises(ValidationError):
            lifecycle.transition(locked, target)
    assert lifecycle.transition(locked, MarketStatus.CANCELLED).status == MarketStatus.CANCELLED


def test_new_attempt_resets_sources_to_pending():
    backup = ApiSource(id="b1", name="Backup", status=OracleStatus.CONFLICT, timestamp=5)
    market = make_market(backups=(backup,))
    fetching = _fetching(market)
    assert all(s.status == OracleStatus.PENDING for s in fetching.oracle_config.sources())


def test_multi_source_outcome_written_back():
    backup = ApiSource(id="b1", name="Backup")
    fetching = _fetching(make_market(backups=(backup,)))
    primary, backup = fetching.oracle_config.sources()
    outcome = OracleOutcome(
        sources=(
            primary.with_result(OracleStatus.VERIFIED, Outcome.YES),
            backup.with_result(OracleStatus.VERIFIED, Outcome.NO),
        ),
        resolved_value=None,
        reason="Oracle sources disagree or none verified",
    )
    disputed = lifecycle.apply_oracle_result(fetching, fetching.attempt_id, outcome)
    assert disputed.status == MarketStatus.DISPUTE_WINDOW
    assert disputed.oracle_config.backup_sources[0].reported_value == Outcome.NO


def test_attempt_ids_never_repeat_for_same_counter():
    first = _fetching()
    # same market rebuilt from scratch reaches the same attempt number
    second = _fetching()
    assert first.resolution_attempt == second.resolution_attempt == 1
    assert first.attempt_id != second.attempt_id
    verdict = _verdict(first, OracleStatus.VERIFIED, Outcome.NO)
    assert lifecycle.apply_oracle_result(second, first.attempt_id, verdict) is None


def test_explicit_zero_timestamp_is_kept():
    locked = lifecycle.lock(make_market(), now=0)
    assert locked.resolution_history[-1].timestamp == 0
