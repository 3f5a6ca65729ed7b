import asyncio

from jobboard.client.scheduler import SEARCH_DEBOUNCE_SECONDS, Debouncer


class TestDebouncer:
    def test_default_delay(self):
        assert Debouncer().delay == SEARCH_DEBOUNCE_SECONDS

    def test_only_last_call_fires(self):
        fired = []

        async def run():
            debouncer = Debouncer(delay=0.01)
            for value in ("r", "re", "react"):
                debouncer.schedule(fired.append, value)
            assert debouncer.pending
            await asyncio.sleep(0.05)
            assert not debouncer.pending

        asyncio.run(run())
        assert fired == ["react"]

    def test_cancel(self):
        fired = []

        async def run():
            debouncer = Debouncer(delay=0.01)
            handle = debouncer.schedule(fired.append, "x")
            debouncer.cancel()
            await asyncio.sleep(0.03)
            return handle

        handle = asyncio.run(run())
        assert handle.cancelled()
        assert fired == []

    def test_coroutine_callbacks_are_awaited_by_drain(self):
        done = []

        async def search(term):
            await asyncio.sleep(0)
            done.append(term)

        async def run():
            debouncer = Debouncer(delay=0.01)
            debouncer.schedule(search, "old")
            debouncer.schedule(search, "new")
            await asyncio.sleep(0.03)
            await debouncer.drain()

        asyncio.run(run())
        assert done == ["new"]
