"""
File management calls.

One-shot request/response mappings over the JSON API. Errors propagate
to the caller; nothing is retried.
"""
from typing import List

from ..models import (
    DeleteFileResponse,
    FileUrl,
    ListFilesOpts,
    PresignedUrlOpts,
    RenameFilesOpts,
    UploadthingFile,
    UsageInfo,
)
from ..protocols import IAPIClient

MAX_PRESIGNED_EXPIRES_IN = 604800  # 7 days


class FileService:
    """Delete, list, rename and locate stored files."""

    def __init__(self, api: IAPIClient):
        self._api = api

    async def delete_files(self, file_keys: List[str]) -> DeleteFileResponse:
        response = await self._api.post("/api/deleteFile", json={"fileKeys": list(file_keys)})
        return DeleteFileResponse.from_dict(response.json())

    async def get_file_urls(self, file_keys: List[str]) -> List[FileUrl]:
        response = await self._api.post("/api/getFileUrl", json={"fileKeys": list(file_keys)})
        return [FileUrl(key=item["key"], url=item["url"]) for item in response.json()["data"]]

    async def list_files(self, opts: ListFilesOpts = None) -> List[UploadthingFile]:
        """List stored files, 10 at a time from offset 0 unless told otherwise."""
        opts = opts or ListFilesOpts()
        response = await self._api.post("/api/listFiles", json=opts.to_payload())
        return [UploadthingFile.from_dict(item) for item in response.json()["files"]]

    async def rename_files(self, opts: RenameFilesOpts) -> None:
        await self._api.post("/api/renameFiles", json=opts.to_payload())

    async def get_usage_info(self) -> UsageInfo:
        response = await self._api.post("/api/getUsageInfo", json={})
        return UsageInfo.from_dict(response.json())

    async def get_presigned_url(self, opts: PresignedUrlOpts) -> str:
        """
        Generate a temporary URL for a private file.

        Raises:
            ValueError: expires_in is above 604800 seconds (7 days)
        """
        if opts.expires_in is not None and opts.expires_in > MAX_PRESIGNED_EXPIRES_IN:
            raise ValueError(f"expiresIn must be less than {MAX_PRESIGNED_EXPIRES_IN}")

        response = await self._api.post("/api/requestFileAccess", json=opts.to_payload())
        return response.json()["url"]
