"""Batch upload coordination - tickets once, then one task per file."""
import asyncio
import logging
from typing import Callable, List, Optional, Sequence

import httpx

from ..cancellation import CancellationSignal
from ..errors import TransferError, UploadCancelled
from ..models import UploadFileOpts, UploadRequest, UploadResult, UploadTicket
from ..services.poller import CompletionPoller, PollOutcome
from ..services.tickets import TicketRequester
from ..services.transfer import FileTransferor
from ..utils.events import EventEmitter
from .models import BatchUploadResult, FileOutcome

logger = logging.getLogger(__name__)


class UploadCoordinator:
    """
    Uploads a batch of files concurrently.

    - One ticket request for the whole batch; its failure aborts the batch
    - One task per file, all started at once (no parallelism cap)
    - A failing file never affects its siblings
    """

    def __init__(
        self,
        tickets: TicketRequester,
        transferor: FileTransferor,
        poller: CompletionPoller,
        signal: CancellationSignal,
    ):
        self._tickets = tickets
        self._transferor = transferor
        self._poller = poller
        self._signal = signal
        self._events = EventEmitter()

    def on_file_complete(self, callback: Callable[[FileOutcome], None]):
        """Called when a file uploads successfully. Receives FileOutcome."""
        self._events.on("file_complete", callback)

    def on_file_fail(self, callback: Callable[[FileOutcome], None]):
        """Called when a file fails, is cancelled or never confirms. Receives FileOutcome."""
        self._events.on("file_fail", callback)

    async def upload(
        self,
        requests: Sequence[UploadRequest],
        opts: Optional[UploadFileOpts] = None,
        wait_until_done: bool = False,
    ) -> List[UploadResult]:
        """
        Upload files and return the successful ones.

        A file missing from the returned list failed, was cancelled or,
        with ``wait_until_done``, was never confirmed as done.

        Raises:
            BatchTicketError: a file could not be read or the ticket request
                failed; nothing was uploaded
        """
        batch = await self.upload_detailed(requests, opts, wait_until_done)
        return batch.results

    async def upload_detailed(
        self,
        requests: Sequence[UploadRequest],
        opts: Optional[UploadFileOpts] = None,
        wait_until_done: bool = False,
    ) -> BatchUploadResult:
        """Upload files and report an outcome for every one of them."""
        requests = list(requests)
        if not requests:
            return BatchUploadResult(outcomes=[])

        opts = opts or UploadFileOpts()
        tickets = await self._tickets.request_tickets(requests, opts)

        logger.info(f"Starting upload: {len(requests)} files (wait_until_done={wait_until_done})")

        tasks = [
            asyncio.create_task(self._upload_single_file(request, ticket, wait_until_done))
            for request, ticket in zip(requests, tickets)
        ]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes = []
        for request, ticket, item in zip(requests, tickets, settled):
            if isinstance(item, BaseException):
                logger.error(f"Unexpected error uploading {request.name}: {item!r}")
                item = await self._finish(FileOutcome.fail(request, ticket.key, repr(item)))
            outcomes.append(item)

        batch = BatchUploadResult(outcomes=outcomes)
        logger.info(
            f"Upload complete: {batch.uploaded_files} successful, "
            f"{batch.failed_files} not uploaded"
        )
        return batch

    async def _upload_single_file(
        self,
        request: UploadRequest,
        ticket: UploadTicket,
        wait_until_done: bool,
    ) -> FileOutcome:
        """Transfer one file, then optionally wait for it to be processed."""
        try:
            size = request.size
            await self._transferor.transfer(ticket, request)

            if wait_until_done:
                outcome = await self._poller.poll_until_done(ticket.key)
                if outcome is PollOutcome.INCOMPLETE:
                    logger.warning(f"Upload of {request.name} was not confirmed as done")
                    return await self._finish(FileOutcome.incomplete(request, ticket.key))

        except UploadCancelled as exc:
            logger.warning(f"Upload cancelled for file {request.path}: {exc}")
            return await self._finish(FileOutcome.cancelled(request, ticket.key, str(exc)))
        except (TransferError, httpx.HTTPError, OSError) as exc:
            logger.error(f"Error uploading file {request.path}: {exc}")
            return await self._finish(FileOutcome.fail(request, ticket.key, str(exc)))

        result = UploadResult(key=ticket.key, url=ticket.file_url, name=request.name, size=size)
        return await self._finish(FileOutcome.ok(request, result))

    async def _finish(self, outcome: FileOutcome) -> FileOutcome:
        event = "file_complete" if outcome.success else "file_fail"
        await self._events.emit(event, outcome)
        return outcome
