"""Cooperative cancellation shared by every in-flight upload task."""
import asyncio
import logging
import signal
from typing import Awaitable, Optional, TypeVar

from .errors import UploadCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationSignal:
    """
    Interrupt raced by every suspension point of an upload batch.

    Passed explicitly to the services that wait on network or timers.
    Cancellation is cooperative: an operation that loses the race is
    abandoned and its outcome discarded; requests already sent are not
    retracted server-side.

    Usage:
        signal = CancellationSignal()
        signal.install_signal_handlers()
        result = await signal.race(client.get(url), "poll")
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        logger.warning(f"Cancellation requested: {reason}")
        self._event.set()

    def raise_if_cancelled(self, what: str) -> None:
        if self._event.is_set():
            raise UploadCancelled(f"{what} cancelled ({self._reason})")

    async def race(self, operation: Awaitable[T], what: str) -> T:
        """
        Await ``operation`` unless the signal fires first.

        Raises:
            UploadCancelled: the signal won; the operation is cancelled
        """
        if self.is_cancelled:
            if asyncio.iscoroutine(operation):
                operation.close()
            self.raise_if_cancelled(what)

        op_task = asyncio.ensure_future(operation)
        signal_task = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {op_task, signal_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            op_task.cancel()
            raise
        finally:
            signal_task.cancel()

        if op_task in done:
            return op_task.result()

        op_task.cancel()
        try:
            await op_task
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            logger.debug(f"Abandoned {what} failed after cancellation: {exc}")
        raise UploadCancelled(f"{what} cancelled ({self._reason})")

    def install_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Route SIGINT/SIGTERM of the running loop to :meth:`cancel`."""
        loop = loop or asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self.cancel, f"received {signal.Signals(signum).name}")
            except (NotImplementedError, RuntimeError, ValueError):
                # signal handlers can only be set in main thread / on unix loops
                logger.debug(f"Could not install handler for {signum}")
