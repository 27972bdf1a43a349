"""
Unit tests for batched async execution.
"""

import asyncio

import pytest

from asset_sync.batching import chunked, process_in_batches


class TestChunked:
    def test_splits_evenly_and_remainder(self):
        assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
        assert chunked([], 3) == []

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError, match="must be positive"):
            chunked([1], 0)


class TestProcessInBatches:
    """Test allSettled-style batch semantics."""

    def test_collects_values_in_order(self):
        async def double(x):
            await asyncio.sleep(0)
            return x * 2

        outcomes = asyncio.run(process_in_batches([1, 2, 3], 2, double))

        assert [o.value for o in outcomes] == [2, 4, 6]
        assert all(o.ok for o in outcomes)

    def test_failure_does_not_block_siblings(self):
        async def flaky(x):
            if x == 2:
                raise RuntimeError("boom")
            return x

        outcomes = asyncio.run(process_in_batches([1, 2, 3], 3, flaky))

        assert [o.ok for o in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, RuntimeError)
        assert outcomes[1].item == 2

    def test_bounded_concurrency(self):
        in_flight = 0
        peak = 0

        async def track(x):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return x

        asyncio.run(process_in_batches(list(range(7)), 3, track))

        assert peak == 3

