"""Tests for cooperative cancellation."""
import asyncio

import pytest

from utapi.cancellation import CancellationSignal
from utapi.errors import UploadCancelled


class TestCancellationSignal:
    @pytest.mark.asyncio
    async def test_race_returns_operation_result(self):
        signal = CancellationSignal()

        async def work():
            await asyncio.sleep(0)
            return 42

        assert await signal.race(work(), "work") == 42

    @pytest.mark.asyncio
    async def test_race_propagates_operation_error(self):
        signal = CancellationSignal()

        async def work():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await signal.race(work(), "work")

    @pytest.mark.asyncio
    async def test_signal_wins_and_abandons_operation(self):
        signal = CancellationSignal()
        abandoned = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                abandoned.set()
                raise

        async def fire():
            await asyncio.sleep(0.01)
            signal.cancel("operator abort")

        asyncio.create_task(fire())
        with pytest.raises(UploadCancelled, match="slow cancelled \\(operator abort\\)"):
            await signal.race(slow(), "slow")

        assert abandoned.is_set()

    @pytest.mark.asyncio
    async def test_already_cancelled_never_starts(self):
        signal = CancellationSignal()
        signal.cancel()
        started = []

        async def work():
            started.append(True)

        with pytest.raises(UploadCancelled):
            await signal.race(work(), "work")

        assert started == []

    def test_cancel_is_idempotent(self):
        signal = CancellationSignal()
        assert signal.is_cancelled is False
        signal.cancel("first")
        signal.cancel("second")
        assert signal.is_cancelled is True
        assert signal.reason == "first"
        with pytest.raises(UploadCancelled, match="first"):
            signal.raise_if_cancelled("poll")
