"""
Models for utapi.

Immutable dataclasses for upload requests, server-issued tickets and
results, plus the shapes of the file management calls.
"""
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


DEFAULT_MIME_TYPE = "application/octet-stream"


class ContentDisposition(Enum):
    """How browsers should present the uploaded file."""
    INLINE = "inline"
    ATTACHMENT = "attachment"


class Acl(Enum):
    """Visibility of the uploaded file."""
    PRIVATE = "private"
    PUBLIC_READ = "public-read"


class FileStatus(Enum):
    """Server-side status of a stored file."""
    DELETION_PENDING = "Deletion Pending"
    FAILED = "Failed"
    UPLOADED = "Uploaded"
    UPLOADING = "Uploading"

    @classmethod
    def parse(cls, value: str) -> "FileStatus":
        """Accept both the spaced wire form and CamelCase variants."""
        normalized = value.replace(" ", "").replace("_", "").lower()
        for status in cls:
            if status.value.replace(" ", "").lower() == normalized:
                return status
        raise ValueError(f"Unknown file status: {value!r}")


def guess_mime_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class UploadRequest:
    """A local file to upload."""
    path: Path
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path))
        if self.name is None:
            object.__setattr__(self, "name", self.path.name)

    @property
    def size(self) -> int:
        """Size on disk in bytes."""
        return self.path.stat().st_size

    @property
    def mime_type(self) -> str:
        return guess_mime_type(self.name)

    def descriptor(self) -> Dict[str, Any]:
        """Wire form sent with the ticket request."""
        return {"name": self.name, "type": self.mime_type, "size": self.size}


@dataclass(frozen=True)
class UploadFileOpts:
    """Options shared by every file of a batch."""
    metadata: Dict[str, str] = field(default_factory=dict)
    content_disposition: ContentDisposition = ContentDisposition.INLINE
    acl: Acl = Acl.PUBLIC_READ

    def to_payload(self, files: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "files": files,
            "metadata": dict(self.metadata),
            "contentDisposition": self.content_disposition.value,
            "acl": self.acl.value,
        }


@dataclass(frozen=True)
class UploadTicket:
    """Server-issued descriptor authorizing the upload of one file."""
    key: str
    file_url: str
    fields: Dict[str, Any] = field(default_factory=dict)
    presigned_url: str = ""
    url: Optional[str] = None
    urls: Optional[List[str]] = None
    chunk_size: Optional[int] = None

    @property
    def destination(self) -> Optional[str]:
        """Single URL the multipart form is posted to, if any."""
        return self.presigned_url or self.url

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadTicket":
        return cls(
            key=data["key"],
            file_url=data["fileUrl"],
            fields=dict(data.get("fields") or {}),
            presigned_url=data.get("presignedUrl") or "",
            url=data.get("url"),
            urls=data.get("urls"),
            chunk_size=data.get("chunkSize", data.get("chunk_size")),
        )


@dataclass(frozen=True)
class UploadResult:
    """Immutable result of one successful upload."""
    key: str
    url: str
    name: str
    size: int


# File management shapes

@dataclass(frozen=True)
class DeleteFileResponse:
    success: bool

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeleteFileResponse":
        return cls(success=bool(data.get("success")))


@dataclass(frozen=True)
class FileUrl:
    key: str
    url: str


@dataclass(frozen=True)
class UploadthingFile:
    key: str
    id: str
    status: FileStatus

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadthingFile":
        return cls(key=data["key"], id=data["id"], status=FileStatus.parse(data["status"]))


@dataclass(frozen=True)
class UsageInfo:
    """Account usage statistics."""
    total_bytes: int
    total_readable: str
    app_total_bytes: float
    app_total_readable: str
    files_uploaded: int
    limit_bytes: float
    limit_readable: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsageInfo":
        return cls(
            total_bytes=int(data["totalBytes"]),
            total_readable=data["totalReadable"],
            app_total_bytes=float(data["appTotalBytes"]),
            app_total_readable=data["appTotalReadable"],
            files_uploaded=int(data["filesUploaded"]),
            limit_bytes=float(data["limitBytes"]),
            limit_readable=data["limitReadable"],
        )


@dataclass(frozen=True)
class ListFilesOpts:
    limit: int = 10
    offset: int = 0

    def to_payload(self) -> Dict[str, int]:
        return {"limit": self.limit, "offset": self.offset}


@dataclass(frozen=True)
class FileRename:
    file_key: str
    new_name: str


@dataclass(frozen=True)
class RenameFilesOpts:
    updates: List[FileRename]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "updates": [
                {"fileKey": u.file_key, "newName": u.new_name} for u in self.updates
            ]
        }


@dataclass(frozen=True)
class PresignedUrlOpts:
    file_key: str
    expires_in: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"fileKey": self.file_key}
        if self.expires_in is not None:
            payload["expiresIn"] = self.expires_in
        return payload
