"""Services for utapi."""
from .api_client import HTTPAPIClient
from .files import FileService
from .poller import CompletionPoller, PollOutcome
from .tickets import TicketRequester
from .transfer import FileTransferor

__all__ = [
    "HTTPAPIClient",
    "FileService",
    "CompletionPoller",
    "PollOutcome",
    "TicketRequester",
    "FileTransferor",
]
