"""Orchestrator data models."""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..models import UploadRequest, UploadResult


class OutcomeStatus(Enum):
    """Per-file status of a batch upload."""
    SUCCESS = "success"
    FAILED = "failed"
    INCOMPLETE = "incomplete"  # transferred, completion never confirmed
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class FileOutcome:
    """What happened to one file of a batch."""
    request: UploadRequest
    status: OutcomeStatus
    key: Optional[str] = None
    result: Optional[UploadResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def name(self) -> str:
        return self.request.name

    @classmethod
    def ok(cls, request: UploadRequest, result: UploadResult) -> "FileOutcome":
        return cls(request=request, status=OutcomeStatus.SUCCESS, key=result.key, result=result)

    @classmethod
    def fail(cls, request: UploadRequest, key: Optional[str], error: str) -> "FileOutcome":
        return cls(request=request, status=OutcomeStatus.FAILED, key=key, error=error)

    @classmethod
    def incomplete(cls, request: UploadRequest, key: str) -> "FileOutcome":
        return cls(
            request=request,
            status=OutcomeStatus.INCOMPLETE,
            key=key,
            error="Upload not confirmed as done",
        )

    @classmethod
    def cancelled(cls, request: UploadRequest, key: Optional[str], error: str) -> "FileOutcome":
        return cls(request=request, status=OutcomeStatus.CANCELLED, key=key, error=error)


@dataclass
class BatchUploadResult:
    """Result of a batch upload, one outcome per requested file."""
    outcomes: List[FileOutcome]

    @property
    def results(self) -> List[UploadResult]:
        return [o.result for o in self.outcomes if o.success and o.result is not None]

    def with_status(self, status: OutcomeStatus) -> List[FileOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def total_files(self) -> int:
        return len(self.outcomes)

    @property
    def uploaded_files(self) -> int:
        return len(self.with_status(OutcomeStatus.SUCCESS))

    @property
    def failed_files(self) -> int:
        return self.total_files - self.uploaded_files

    @property
    def all_success(self) -> bool:
        return self.failed_files == 0
