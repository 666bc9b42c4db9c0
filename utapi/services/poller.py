"""Completion polling with bounded exponential backoff and jitter."""
import asyncio
import logging
import random
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx

from ..cancellation import CancellationSignal
from ..config import UploadthingConfig
from ..errors import PollTransportError
from ..protocols import IAPIClient

logger = logging.getLogger(__name__)

MAX_RETRIES = 20
INITIAL_BACKOFF_MS = 500
MAXIMUM_BACKOFF_MS = 64 * 1000
MAX_JITTER_MS = 500
LOG_AFTER_TRIES = 3

POLL_PATH = "/api/pollUpload"


class PollOutcome(Enum):
    """Terminal state of a poll loop."""
    DONE = "done"
    INCOMPLETE = "incomplete"  # budget exhausted, not an error


def backoff_delay_ms(tries: int) -> int:
    """Delay before the next attempt once ``tries`` attempts were consumed, without jitter."""
    return min(MAXIMUM_BACKOFF_MS, INITIAL_BACKOFF_MS * 2 ** tries)


class CompletionPoller:
    """
    Asks the service whether a file finished server-side processing.

    Transport failures and non-terminal statuses only consume attempts.
    Exhausting the budget yields ``PollOutcome.INCOMPLETE``.
    """

    def __init__(
        self,
        api: IAPIClient,
        config: UploadthingConfig,
        signal: CancellationSignal,
        max_retries: int = MAX_RETRIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self._api = api
        self._config = config
        self._signal = signal
        self._max_retries = max_retries
        self._sleep = sleep
        self._rng = rng or random.Random()

    def poll_url(self, key: str) -> str:
        return self._config.url_for(f"{POLL_PATH}/{key}")

    async def check_once(self, key: str) -> bool:
        """
        One attempt. True when the service reports ``status == "done"``.

        Raises:
            PollTransportError: request failed or body was not JSON
            UploadCancelled: the signal fired during the request
        """
        url = self.poll_url(key)
        try:
            response = await self._signal.race(self._api.get(url), f"Polling of {key}")
            body = response.json()
        except httpx.HTTPError as exc:
            raise PollTransportError(f"Error polling for file data for {url}: {exc}") from exc
        except ValueError as exc:
            raise PollTransportError(f"Invalid poll response for {url}: {exc}") from exc

        return isinstance(body, dict) and body.get("status") == "done"

    async def poll_until_done(self, key: str) -> PollOutcome:
        """
        Poll until done or the retry budget is spent.

        Raises:
            UploadCancelled: the signal fired during a request or before/while sleeping
        """
        tries = 0
        while True:
            try:
                if await self.check_once(key):
                    return PollOutcome.DONE
            except PollTransportError as exc:
                logger.warning(str(exc))

            tries += 1
            if tries > self._max_retries:
                logger.info(f"Gave up waiting for {key} after {tries} tries")
                return PollOutcome.INCOMPLETE

            delay_ms = backoff_delay_ms(tries)
            wait_ms = delay_ms + self._rng.randrange(MAX_JITTER_MS)

            if tries > LOG_AFTER_TRIES:
                logger.info(
                    f"Call unsuccessful after {tries} tries. "
                    f"Retrying in {delay_ms // 1000} seconds..."
                )

            self._signal.raise_if_cancelled(f"Polling of {key}")
            await self._signal.race(self._sleep(wait_ms / 1000), f"Polling of {key}")
