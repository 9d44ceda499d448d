"""Periodic read-refresh of the ledger registry."""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Any

import structlog

from omnioracle.ledger.store import LedgerSnapshot, LedgerStore, Listener

log = structlog.get_logger(__name__)


class RegistryPoller:
    """Re-reads markets and trades every ``interval_sec`` and republishes the snapshot.

    Complements ``LedgerStore.subscribe`` for readers that share a database
    file with another writer process.
    """

    def __init__(self, store: LedgerStore, interval_sec: float = 2.0, on_refresh: Listener | None = None):
        self.store = store
        self.interval_sec = interval_sec
        self.on_refresh = on_refresh
        self.latest: LedgerSnapshot | None = None
        self._refresh_count = 0
        self._start_ts: float | None = None

    def refresh(self) -> LedgerSnapshot:
        snap = self.store.snapshot()
        self.latest = snap
        self._refresh_count += 1
        if self.on_refresh is not None:
            self.on_refresh(snap)
        return snap

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Refresh until stop_event is set."""
        stop = stop_event or asyncio.Event()
        self._start_ts = time.time()
        while not stop.is_set():
            self.refresh()
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=self.interval_sec)
        log.info("poller_stopped", refreshes=self._refresh_count)

    def get_status(self) -> dict[str, Any]:
        """Return refresh count and elapsed time."""
        elapsed = (time.time() - self._start_ts) if self._start_ts else 0
        return {
            "refresh_count": self._refresh_count,
            "elapsed_sec": round(elapsed, 1),
            "markets": len(self.latest.markets) if self.latest else 0,
        }
