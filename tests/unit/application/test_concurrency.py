"""Tests for the bounded task pool."""

import asyncio

import pytest

from idl_sentinel.application.services.concurrency import bounded_map


class TestBoundedMap:
    """Test bounded concurrent mapping."""

    @pytest.mark.asyncio
    async def test_in_flight_never_exceeds_limit(self):
        in_flight = 0
        peak = 0

        async def worker(item: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return item * 2

        outcomes = await bounded_map(list(range(25)), worker, limit=10)

        assert peak <= 10
        assert peak > 1
        assert [o.result for o in outcomes] == [i * 2 for i in range(25)]

    @pytest.mark.asyncio
    async def test_failures_are_captured_per_item(self):
        async def worker(item: int) -> int:
            if item == 2:
                raise RuntimeError("boom")
            return item

        outcomes = await bounded_map([1, 2, 3], worker, limit=2)

        assert [o.ok for o in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, RuntimeError)
        assert outcomes[1].item == 2
        assert outcomes[2].result == 3

    @pytest.mark.asyncio
    async def test_empty_input(self):
        async def worker(item):
            return item

        assert await bounded_map([], worker, limit=3) == []

    @pytest.mark.asyncio
    async def test_invalid_limit(self):
        async def worker(item):
            return item

        with pytest.raises(ValueError):
            await bounded_map([1], worker, limit=0)
