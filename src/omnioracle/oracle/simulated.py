"""Simulated oracle: random verdicts after a fixed latency."""

from __future__ import annotations

import asyncio
import random
import time

import structlog

from omnioracle.models import OracleSource, OracleStatus, Outcome
from omnioracle.oracle.base import OracleCollaborator

log = structlog.get_logger(__name__)


class SimulatedOracle(OracleCollaborator):
    """Mostly verifies, biased towards YES. Seed the RNG for reproducible runs."""

    def __init__(
        self,
        latency_sec: float = 1.5,
        success_rate: float = 0.95,
        yes_bias: float = 0.7,
        seed: int | None = None,
    ) -> None:
        self.latency_sec = latency_sec
        self.success_rate = success_rate
        self.yes_bias = yes_bias
        self._rng = random.Random(seed)

    @classmethod
    def from_settings(cls, settings) -> SimulatedOracle:
        return cls(
            latency_sec=settings.oracle_latency_sec,
            success_rate=settings.oracle_success_rate,
            yes_bias=settings.oracle_yes_bias,
            seed=settings.oracle_seed,
        )

    async def fetch(self, source: OracleSource) -> OracleSource:
        if self.latency_sec > 0:
            await asyncio.sleep(self.latency_sec)
        now_ms = int(time.time() * 1000)
        if self._rng.random() < self.success_rate:
            value = Outcome.YES if self._rng.random() < self.yes_bias else Outcome.NO
            log.debug("simulated_oracle_verified", source_id=source.id, value=value.value)
            return source.with_result(OracleStatus.VERIFIED, value, timestamp=now_ms)
        log.debug("simulated_oracle_conflict", source_id=source.id)
        return source.with_result(OracleStatus.CONFLICT, timestamp=now_ms)
