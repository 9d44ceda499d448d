"""Shared fixtures: market builders, scripted oracles, ledgers."""

import asyncio
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from omnioracle.config import Settings
from omnioracle.ledger import LedgerStore
from omnioracle.models import (
    ApiSource,
    Market,
    MarketStatus,
    OracleConfig,
    OracleSource,
    OracleStatus,
    Outcome,
    PoolBalance,
)
from omnioracle.oracle import OracleCollaborator
from omnioracle.storage import DuckDBRepository, MemoryRepository, get_connection, init_schema


def make_market(
    market_id: str = "mk",
    yes: float = 0.65,
    liquidity: float = 5000.0,
    status: MarketStatus = MarketStatus.ACTIVE,
    backups: tuple = (),
) -> Market:
    return Market(
        market_id=market_id,
        title="Will it happen?",
        end_date=datetime(2030, 1, 1, tzinfo=timezone.utc),
        status=status,
        probabilities=(yes, 1 - yes),
        liquidity=liquidity,
        pool_balance=PoolBalance.seeded(liquidity, yes),
        oracle_config=OracleConfig(
            primary_source=ApiSource(id="src-1", name="Feed", url="https://feed.example/result"),
            backup_sources=backups,
            resolution_criteria="Official result",
        ),
    )


class ScriptedOracle(OracleCollaborator):
    """Returns a fixed verdict and records every call."""

    def __init__(self, status: OracleStatus = OracleStatus.VERIFIED, value: Outcome | None = Outcome.YES):
        self.status = status
        self.value = value
        self.calls: list[OracleSource] = []

    async def fetch(self, source: OracleSource) -> OracleSource:
        self.calls.append(source)
        value = self.value if self.status == OracleStatus.VERIFIED else None
        return source.with_result(self.status, value, timestamp=1)


class HangingOracle(OracleCollaborator):
    async def fetch(self, source: OracleSource) -> OracleSource:
        await asyncio.sleep(3600)
        return source


class GatedOracle(OracleCollaborator):
    """Hands out verdicts in call order but holds each fetch until its gate is set."""

    def __init__(self, values: list[Outcome]):
        self.values = list(values)
        self.gates: list[asyncio.Event] = []

    async def fetch(self, source: OracleSource) -> OracleSource:
        value = self.values.pop(0)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return source.with_result(OracleStatus.VERIFIED, value, timestamp=1)


class FailingOracle(OracleCollaborator):
    async def fetch(self, source: OracleSource) -> OracleSource:
        raise ConnectionError("feed unreachable")


@pytest.fixture
def settings():
    return Settings(oracle={"timeout_sec": 0.5, "latency_sec": 0})


@pytest.fixture
def oracle():
    return ScriptedOracle()


@pytest.fixture
def store(settings, oracle):
    return LedgerStore(MemoryRepository(), settings, oracle)


@pytest.fixture
def temp_db_path():
    tmp = tempfile.mkdtemp()
    path = Path(tmp) / "ledger.duckdb"
    yield path
    path.unlink(missing_ok=True)
    for leftover in Path(tmp).iterdir():
        leftover.unlink()
    Path(tmp).rmdir()


@pytest.fixture
def duck_store(temp_db_path, settings, oracle):
    conn = get_connection(temp_db_path)
    init_schema(conn)
    s = LedgerStore(DuckDBRepository(conn), settings, oracle)
    yield s
    s.close()
