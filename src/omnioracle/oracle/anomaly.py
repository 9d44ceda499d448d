"""Cross-source agreement rules for oracle results."""

from __future__ import annotations

from dataclasses import dataclass

from omnioracle.models import OracleSource, OracleStatus, Outcome


@dataclass(frozen=True)
class OracleOutcome:
    """Aggregated verdict of one resolution attempt."""

    sources: tuple[OracleSource, ...]
    resolved_value: Outcome | None
    reason: str

    @property
    def is_verified(self) -> bool:
        return self.resolved_value is not None


def detect_anomalies(sources: list[OracleSource]) -> bool:
    """True if verified sources disagree or none verified. Single sources are never anomalous."""
    if len(sources) < 2:
        return False
    values = [s.reported_value for s in sources if s.has_verified_value]
    if not values:
        return True
    return any(v != values[0] for v in values)


def evaluate_sources(sources: list[OracleSource]) -> OracleOutcome:
    """Reduce fetched sources to a single verdict.

    Resolves only when every source is VERIFIED with a reported value and all
    values agree; anything else goes to the dispute window.
    """
    sources_t = tuple(sources)
    if not sources:
        return OracleOutcome(sources_t, None, "No oracle sources configured")
    if detect_anomalies(sources):
        return OracleOutcome(sources_t, None, "Oracle sources disagree or none verified")
    unverified = [s for s in sources if not s.has_verified_value]
    if unverified:
        names = ", ".join(f"{s.name} ({s.status.value})" for s in unverified)
        return OracleOutcome(sources_t, None, f"Unverified oracle result: {names}")
    value = sources[0].reported_value
    return OracleOutcome(sources_t, value, f"Oracle returned {value.value}")


def rejected(source: OracleSource, timestamp: int | None = None) -> OracleSource:
    """Mark a source REJECTED (failed or timed-out fetch)."""
    return source.with_result(OracleStatus.REJECTED, timestamp=timestamp)
