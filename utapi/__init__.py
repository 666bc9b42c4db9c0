"""
utapi - UploadThing API client.

Uploads batches of local files concurrently, optionally waiting for the
service to finish processing them, and manages stored files.

Usage:
    from pathlib import Path
    from utapi import UtApi, UploadRequest, UploadFileOpts, Acl

    async with UtApi(api_key="sk_live_...") as api:
        results = await api.upload_files(
            [UploadRequest(Path("report.pdf")), UploadRequest(Path("logo.png"))],
            UploadFileOpts(acl=Acl.PRIVATE),
            wait_until_done=True,
        )

    # Per-file outcomes instead of the successes only
    batch = await api.upload_files_detailed(requests)
    for outcome in batch.outcomes:
        print(outcome.name, outcome.status.value, outcome.error)
"""
from .cancellation import CancellationSignal
from .config import UploadthingConfig, VERSION
from .errors import (
    BatchTicketError,
    ConfigError,
    PollTransportError,
    TicketFieldError,
    TransferError,
    UploadCancelled,
    UploadthingAPIError,
    UploadthingError,
)
from .models import (
    Acl,
    ContentDisposition,
    DeleteFileResponse,
    FileRename,
    FileStatus,
    FileUrl,
    ListFilesOpts,
    PresignedUrlOpts,
    RenameFilesOpts,
    UploadFileOpts,
    UploadRequest,
    UploadResult,
    UploadTicket,
    UploadthingFile,
    UsageInfo,
)
from .orchestrator import BatchUploadResult, FileOutcome, OutcomeStatus, UploadCoordinator, UtApi

__version__ = VERSION
__all__ = [
    # Main
    "UtApi",
    "UploadCoordinator",
    "CancellationSignal",
    "UploadthingConfig",
    # Upload models
    "UploadRequest",
    "UploadFileOpts",
    "UploadTicket",
    "UploadResult",
    "ContentDisposition",
    "Acl",
    "BatchUploadResult",
    "FileOutcome",
    "OutcomeStatus",
    # File management models
    "DeleteFileResponse",
    "FileUrl",
    "FileStatus",
    "UploadthingFile",
    "UsageInfo",
    "ListFilesOpts",
    "RenameFilesOpts",
    "FileRename",
    "PresignedUrlOpts",
    # Errors
    "UploadthingError",
    "ConfigError",
    "UploadthingAPIError",
    "BatchTicketError",
    "TransferError",
    "TicketFieldError",
    "PollTransportError",
    "UploadCancelled",
]
