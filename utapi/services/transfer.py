"""Single-file transfer to a ticket's destination."""
import asyncio
import logging
from typing import Dict

from ..cancellation import CancellationSignal
from ..errors import TicketFieldError, TransferError
from ..models import UploadRequest, UploadTicket
from ..protocols import IAPIClient

logger = logging.getLogger(__name__)


def build_form_fields(ticket: UploadTicket) -> Dict[str, str]:
    """
    Text parts of the multipart form, in ticket order.

    Raises:
        TicketFieldError: a field value is not a string
    """
    fields = {}
    for name, value in ticket.fields.items():
        if not isinstance(value, str):
            raise TicketFieldError(
                f"Ticket {ticket.key}: field {name!r} must be a string, "
                f"got {type(value).__name__}"
            )
        fields[name] = value
    return fields


class FileTransferor:
    """Pushes one file's bytes using the server-supplied form fields."""

    def __init__(self, api: IAPIClient, signal: CancellationSignal):
        self._api = api
        self._signal = signal

    async def transfer(self, ticket: UploadTicket, request: UploadRequest) -> None:
        """
        Upload ``request``'s file as described by ``ticket``.

        No retry: a failure is terminal for this file.

        Raises:
            TicketFieldError: invalid ticket fields (nothing sent)
            TransferError: non-2xx response or unusable ticket
            UploadCancelled: the signal fired before the response arrived
        """
        destination = ticket.destination
        if not destination:
            raise TransferError(f"Ticket {ticket.key} has no single upload destination")

        fields = build_form_fields(ticket)

        self._signal.raise_if_cancelled(f"Upload of {request.name}")
        content = await asyncio.to_thread(request.path.read_bytes)

        files = {"file": (request.name, content, request.mime_type)}
        logger.debug(f"Transferring {request.name} ({len(content)} bytes) to {destination}")

        response = await self._signal.race(
            self._api.post_multipart(destination, data=fields, files=files),
            f"Upload of {request.name}",
        )

        if not response.is_success:
            text = response.text
            logger.error(f"Failed to upload file {request.name}: {text}")
            raise TransferError(
                f"Upload of {request.name} failed with status {response.status_code}: {text}",
                status_code=response.status_code,
                body=text,
            )
