"""Registry poller and push subscription."""

import asyncio

from omnioracle.ledger import RegistryPoller


def test_refresh_publishes_snapshot(store):
    seen = []
    poller = RegistryPoller(store, interval_sec=0.01, on_refresh=seen.append)
    snap = poller.refresh()
    assert [m.market_id for m in snap.markets] == ["m1", "m2"]
    assert seen == [snap]
    assert poller.get_status()["markets"] == 2


def test_run_until_stopped(store):
    poller = RegistryPoller(store, interval_sec=0.01)

    async def drive():
        stop = asyncio.Event()
        task = asyncio.create_task(poller.run(stop))
        await asyncio.sleep(0.05)
        stop.set()
        await task

    asyncio.run(drive())
    assert poller.get_status()["refresh_count"] >= 2


def test_failing_listener_does_not_block_commit(store):
    def boom(_):
        raise RuntimeError("listener broke")

    store.subscribe(boom)
    receipt = store.trade("m1", "YES", 50)
    assert store.list_trades()[0].trade_id == receipt.trade.trade_id
