"""Ticket acquisition - one batched call per upload batch."""
import json
import logging
from typing import List, Sequence

import httpx

from ..errors import BatchTicketError, UploadthingAPIError
from ..models import UploadFileOpts, UploadRequest, UploadTicket
from ..protocols import IAPIClient

logger = logging.getLogger(__name__)

UPLOAD_FILES_PATH = "/api/uploadFiles"


class TicketRequester:
    """Exchanges file descriptors for positionally aligned upload tickets."""

    def __init__(self, api: IAPIClient):
        self._api = api

    async def request_tickets(
        self,
        requests: Sequence[UploadRequest],
        opts: UploadFileOpts,
    ) -> List[UploadTicket]:
        """
        Request one ticket per file in a single round trip.

        Returns:
            Tickets in the same order as ``requests``

        Raises:
            BatchTicketError: a file could not be read, or the call failed or
                returned a malformed body
        """
        try:
            descriptors = [r.descriptor() for r in requests]
        except OSError as exc:
            logger.error(f"Cannot describe file for upload: {exc}")
            raise BatchTicketError(f"Cannot read file for upload: {exc}") from exc

        payload = opts.to_payload(descriptors)

        try:
            response = await self._api.post(UPLOAD_FILES_PATH, json=payload)
            data = response.json()["data"]
            tickets = [UploadTicket.from_dict(item) for item in data]
        except (UploadthingAPIError, httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.error(f"Error requesting upload tickets: {exc}")
            logger.error(f"Data sent in request:\n{json.dumps(payload)}")
            raise BatchTicketError(f"Ticket request failed: {exc}", payload=payload) from exc

        if len(tickets) != len(requests):
            logger.error(f"Data sent in request:\n{json.dumps(payload)}")
            raise BatchTicketError(
                f"Expected {len(requests)} tickets, got {len(tickets)}",
                payload=payload,
            )

        return tickets
