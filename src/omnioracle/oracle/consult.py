"""Consult oracle sources concurrently with a per-source timeout."""

from __future__ import annotations

import asyncio
import time

import structlog

from omnioracle.models import OracleSource
from omnioracle.oracle.anomaly import OracleOutcome, evaluate_sources, rejected
from omnioracle.oracle.base import OracleCollaborator

log = structlog.get_logger(__name__)


async def _fetch_one(
    collaborator: OracleCollaborator,
    source: OracleSource,
    timeout_sec: float | None,
) -> OracleSource:
    try:
        return await asyncio.wait_for(collaborator.fetch(source), timeout=timeout_sec)
    except asyncio.TimeoutError:
        log.warning("oracle_timeout", source_id=source.id, timeout_sec=timeout_sec)
    except Exception as e:  # collaborator failures settle as REJECTED, never propagate
        log.warning("oracle_fetch_failed", source_id=source.id, error=repr(e))
    return rejected(source, timestamp=int(time.time() * 1000))


async def consult(
    collaborator: OracleCollaborator,
    sources: list[OracleSource],
    timeout_sec: float | None = 10.0,
) -> OracleOutcome:
    """Fetch every source once and reduce the results to one verdict."""
    results = await asyncio.gather(*(_fetch_one(collaborator, s, timeout_sec) for s in sources))
    outcome = evaluate_sources(list(results))
    log.info(
        "oracle_result",
        sources=len(results),
        statuses=[s.status.value for s in results],
        resolved_value=outcome.resolved_value.value if outcome.resolved_value else None,
    )
    return outcome
