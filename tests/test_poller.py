"""Tests for completion polling and backoff."""
import asyncio
import logging

import httpx
import pytest

from utapi.errors import UploadCancelled
from utapi.services.api_client import HTTPAPIClient
from utapi.services.poller import (
    MAXIMUM_BACKOFF_MS,
    MAX_RETRIES,
    PollOutcome,
    backoff_delay_ms,
)


class TestBackoff:
    def test_doubles_from_500ms(self):
        assert backoff_delay_ms(0) == 500
        assert backoff_delay_ms(1) == 1000
        assert backoff_delay_ms(2) == 2000
        assert backoff_delay_ms(6) == 32000

    def test_capped_at_64_seconds(self):
        assert backoff_delay_ms(7) == MAXIMUM_BACKOFF_MS
        assert backoff_delay_ms(20) == MAXIMUM_BACKOFF_MS

    def test_formula(self):
        for k in range(1, MAX_RETRIES + 1):
            assert backoff_delay_ms(k) == min(64000, 500 * 2 ** k)


class TestCompletionPoller:
    @pytest.mark.asyncio
    async def test_done_on_first_attempt(self, config, service, signal, poller_factory, fake_sleep):
        async with HTTPAPIClient(config, transport=service.transport) as api:
            poller = poller_factory(api, config, signal)
            assert await poller.poll_until_done("key-9") is PollOutcome.DONE

        assert [str(r.url) for r in service.polls] == ["https://uploadthing.test/api/pollUpload/key-9"]
        assert service.polls[0].headers["x-uploadthing-api-key"] == "sk_test_123"
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_non_done_statuses_consume_attempts(
        self, config, service, signal, poller_factory, fake_sleep
    ):
        service.poll_statuses["k"] = ["uploading", "<missing>", "<broken>", "done"]

        async with HTTPAPIClient(config, transport=service.transport) as api:
            poller = poller_factory(api, config, signal)
            assert await poller.poll_until_done("k") is PollOutcome.DONE

        assert len(service.polls) == 4
        assert len(fake_sleep.delays) == 3

    @pytest.mark.asyncio
    async def test_realized_delay_within_jitter_bound(
        self, config, service, signal, poller_factory, fake_sleep
    ):
        service.default_poll_status = "uploading"

        async with HTTPAPIClient(config, transport=service.transport) as api:
            poller = poller_factory(api, config, signal)
            await poller.poll_until_done("k")

        for k, delay in enumerate(fake_sleep.delays, start=1):
            base = min(64000, 500 * 2 ** k) / 1000
            assert base <= delay < base + 0.5

    @pytest.mark.asyncio
    async def test_budget_exhaustion_is_incomplete_not_error(
        self, config, service, signal, poller_factory, fake_sleep
    ):
        service.default_poll_status = "uploading"

        async with HTTPAPIClient(config, transport=service.transport) as api:
            poller = poller_factory(api, config, signal)
            outcome = await poller.poll_until_done("k")

        assert outcome is PollOutcome.INCOMPLETE
        assert len(service.polls) == MAX_RETRIES + 1
        assert len(fake_sleep.delays) == MAX_RETRIES

    @pytest.mark.asyncio
    async def test_transport_errors_are_logged_and_retried(
        self, config, signal, poller_factory, fake_sleep, caplog
    ):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"status": "done"})

        with caplog.at_level(logging.WARNING, logger="utapi.services.poller"):
            async with HTTPAPIClient(config, transport=httpx.MockTransport(handler)) as api:
                poller = poller_factory(api, config, signal)
                assert await poller.poll_until_done("k") is PollOutcome.DONE

        assert len(calls) == 3
        assert "connection refused" in caplog.text

    @pytest.mark.asyncio
    async def test_progress_logged_from_fourth_try(
        self, config, service, signal, poller_factory, caplog
    ):
        service.poll_statuses["k"] = ["uploading"] * 4 + ["done"]

        with caplog.at_level(logging.INFO, logger="utapi.services.poller"):
            async with HTTPAPIClient(config, transport=service.transport) as api:
                poller = poller_factory(api, config, signal)
                await poller.poll_until_done("k")

        messages = [r.getMessage() for r in caplog.records if "unsuccessful" in r.getMessage()]
        assert messages == ["Call unsuccessful after 4 tries. Retrying in 8 seconds..."]

    @pytest.mark.asyncio
    async def test_cancelled_before_sleep(self, config, service, signal, poller_factory, fake_sleep):
        service.default_poll_status = "uploading"

        async def cancel_on_sleep(seconds):
            fake_sleep.delays.append(seconds)
            signal.cancel("stop")

        async with HTTPAPIClient(config, transport=service.transport) as api:
            poller = poller_factory(api, config, signal, sleep=cancel_on_sleep)
            with pytest.raises(UploadCancelled, match="stop"):
                await poller.poll_until_done("k")

        assert len(service.polls) == 1
        assert len(fake_sleep.delays) == 1

    @pytest.mark.asyncio
    async def test_cancelled_during_poll_request(self, config, service, signal, poller_factory, fake_sleep):
        service.blocked_polls.add("k")

        async def cancel_once_polling():
            while not service.polls:
                await asyncio.sleep(0)
            signal.cancel("stop")

        async with HTTPAPIClient(config, transport=service.transport) as api:
            poller = poller_factory(api, config, signal)
            canceller = asyncio.create_task(cancel_once_polling())
            with pytest.raises(UploadCancelled, match="stop"):
                await poller.poll_until_done("k")
            await canceller

        assert len(service.polls) == 1
        assert fake_sleep.delays == []
