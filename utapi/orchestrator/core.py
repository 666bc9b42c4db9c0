"""Core facade - wires configuration, transport and services together."""
from typing import Callable, List, Optional, Sequence

import httpx

from ..cancellation import CancellationSignal
from ..config import UploadthingConfig
from ..models import (
    DeleteFileResponse,
    FileUrl,
    ListFilesOpts,
    PresignedUrlOpts,
    RenameFilesOpts,
    UploadFileOpts,
    UploadRequest,
    UploadResult,
    UploadthingFile,
    UsageInfo,
)
from ..services.api_client import HTTPAPIClient
from ..services.files import FileService
from ..services.poller import CompletionPoller
from ..services.tickets import TicketRequester
from ..services.transfer import FileTransferor
from .coordinator import UploadCoordinator
from .models import BatchUploadResult, FileOutcome


class UtApi:
    """
    Client for the UploadThing API using injected services.

    Usage:
        async with UtApi(api_key="sk_live_...") as api:
            results = await api.upload_files([UploadRequest(Path("a.png"))])
            await api.delete_files([r.key for r in results])

        # Cancel every in-flight upload on Ctrl+C
        signal = CancellationSignal()
        async with UtApi(signal=signal) as api:
            signal.install_signal_handlers()
            batch = await api.upload_files_detailed(requests, wait_until_done=True)
    """

    def __init__(
        self,
        config: Optional[UploadthingConfig] = None,
        api_key: Optional[str] = None,
        signal: Optional[CancellationSignal] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poller_factory: Callable[..., CompletionPoller] = CompletionPoller,
    ):
        """
        Initialize client with dependencies.

        Args:
            config: Client configuration; built from the environment when omitted
            api_key: Overrides UPLOADTHING_SECRET when config is omitted
            signal: Cancellation signal shared by all uploads of this client
            transport: Custom httpx transport (tests, proxies)
            poller_factory: Builds the completion poller
        """
        self._config = config or UploadthingConfig.from_env(api_key=api_key)
        self._signal = signal or CancellationSignal()
        self._transport = transport
        self._poller_factory = poller_factory

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._files: Optional[FileService] = None
        self._coordinator: Optional[UploadCoordinator] = None
        self._pending_hooks: List[tuple] = []

    @property
    def config(self) -> UploadthingConfig:
        return self._config

    @property
    def signal(self) -> CancellationSignal:
        return self._signal

    async def __aenter__(self):
        self._api_client = HTTPAPIClient(self._config, transport=self._transport)
        await self._api_client.__aenter__()

        self._files = FileService(self._api_client)
        self._coordinator = UploadCoordinator(
            TicketRequester(self._api_client),
            FileTransferor(self._api_client, self._signal),
            self._poller_factory(self._api_client, self._config, self._signal),
            self._signal,
        )
        for event, callback in self._pending_hooks:
            getattr(self._coordinator, event)(callback)
        return self

    async def __aexit__(self, *args):
        if self._api_client:
            await self._api_client.__aexit__(*args)

    def on_file_complete(self, callback: Callable[[FileOutcome], None]):
        self._register("on_file_complete", callback)

    def on_file_fail(self, callback: Callable[[FileOutcome], None]):
        self._register("on_file_fail", callback)

    def _register(self, event: str, callback: Callable):
        self._pending_hooks.append((event, callback))
        if self._coordinator is not None:
            getattr(self._coordinator, event)(callback)

    async def upload_files(
        self,
        files: Sequence[UploadRequest],
        opts: Optional[UploadFileOpts] = None,
        wait_until_done: bool = False,
    ) -> List[UploadResult]:
        """Upload files; failed, cancelled or unconfirmed files are left out."""
        assert self._coordinator is not None
        return await self._coordinator.upload(files, opts, wait_until_done)

    async def upload_files_detailed(
        self,
        files: Sequence[UploadRequest],
        opts: Optional[UploadFileOpts] = None,
        wait_until_done: bool = False,
    ) -> BatchUploadResult:
        """Upload files and report a per-file outcome."""
        assert self._coordinator is not None
        return await self._coordinator.upload_detailed(files, opts, wait_until_done)

    async def delete_files(self, file_keys: List[str]) -> DeleteFileResponse:
        assert self._files is not None
        return await self._files.delete_files(file_keys)

    async def get_file_urls(self, file_keys: List[str]) -> List[FileUrl]:
        assert self._files is not None
        return await self._files.get_file_urls(file_keys)

    async def list_files(self, opts: Optional[ListFilesOpts] = None) -> List[UploadthingFile]:
        assert self._files is not None
        return await self._files.list_files(opts)

    async def rename_files(self, opts: RenameFilesOpts) -> None:
        assert self._files is not None
        await self._files.rename_files(opts)

    async def get_usage_info(self) -> UsageInfo:
        assert self._files is not None
        return await self._files.get_usage_info()

    async def get_presigned_url(self, opts: PresignedUrlOpts) -> str:
        assert self._files is not None
        return await self._files.get_presigned_url(opts)
