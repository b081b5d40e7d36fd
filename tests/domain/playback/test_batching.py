"""Tests for batched background work."""

import asyncio

import pytest

from droplist.domain.playback.batching import run_in_batches


class TestRunInBatches:
    """Tests for run_in_batches."""

    def test_batches_and_callbacks(self) -> None:
        """Items run in groups and the callback fires after each group."""
        batches = []

        async def worker(item: int) -> int:
            return item * 10

        results = asyncio.run(
            run_in_batches(range(7), worker, batch_size=3, delay=0, on_batch=batches.append)
        )

        assert results == [(i, i * 10) for i in range(7)]
        assert [len(batch) for batch in batches] == [3, 3, 1]

    def test_concurrency_capped_by_batch_size(self) -> None:
        """No more than batch_size workers run at once."""
        running = 0
        peak = 0

        async def worker(item: int) -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return item

        asyncio.run(run_in_batches(range(10), worker, batch_size=3, delay=0))
        assert peak == 3

    def test_failures_do_not_abort(self) -> None:
        """A failing item is dropped and the rest still run."""

        async def worker(item: int) -> int:
            if item == 1:
                raise RuntimeError("decode failed")
            return item

        results = asyncio.run(run_in_batches([0, 1, 2, 3], worker, batch_size=2, delay=0))
        assert results == [(0, 0), (2, 2), (3, 3)]

    def test_invalid_batch_size(self) -> None:
        """Batch size must be positive."""

        async def worker(item: int) -> int:
            return item

        with pytest.raises(ValueError):
            asyncio.run(run_in_batches([1], worker, batch_size=0))

    def test_empty_input(self) -> None:
        """No items means no callbacks."""
        calls = []

        async def worker(item: int) -> int:
            return item

        assert asyncio.run(run_in_batches([], worker, on_batch=calls.append)) == []
        assert calls == []

    def test_async_callback_awaited_between_batches(self) -> None:
        """An async callback finishes before the next batch starts."""
        events = []

        async def worker(item: int) -> int:
            events.append(f"work {item}")
            return item

        async def on_batch(pairs: list) -> None:
            await asyncio.sleep(0.01)
            events.append(f"saved {[item for item, _ in pairs]}")

        asyncio.run(run_in_batches(range(3), worker, batch_size=2, delay=0, on_batch=on_batch))
        assert events == ["work 0", "work 1", "saved [0, 1]", "work 2", "saved [2]"]
