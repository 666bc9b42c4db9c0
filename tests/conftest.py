"""Shared fixtures: an in-memory UploadThing service behind httpx.MockTransport."""
import asyncio
import functools
import json
import random
from typing import Dict, List

import httpx
import pytest

from utapi.cancellation import CancellationSignal
from utapi.config import UploadthingConfig
from utapi.services.poller import CompletionPoller

API_HOST = "https://uploadthing.test"
UPLOAD_HOST = "upload.test"


class FakeUploadthing:
    """
    Minimal fake of the UploadThing endpoints used by the client.

    Tickets are issued as ``key-<index>``; transfers go to
    ``https://upload.test/<index>``.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.ticket_status = 200
        self.ticket_error = {"error": "Invalid file type"}
        self.ticket_count_delta = 0
        self.transfer_status: Dict[int, int] = {}
        self.blocked_transfers: set = set()
        self.crashing_transfers: set = set()
        self.poll_statuses: Dict[str, List[str]] = {}
        self.blocked_polls: set = set()
        self.default_poll_status = "done"
        self.json_responses: Dict[str, dict] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requests_to(self, host: str = None, path_prefix: str = "") -> List[httpx.Request]:
        return [
            r for r in self.requests
            if (host is None or r.url.host == host) and r.url.path.startswith(path_prefix)
        ]

    @property
    def transfers(self) -> List[httpx.Request]:
        return self.requests_to(UPLOAD_HOST)

    @property
    def polls(self) -> List[httpx.Request]:
        return self.requests_to(path_prefix="/api/pollUpload/")

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == UPLOAD_HOST:
            index = int(request.url.path.strip("/"))
            if index in self.blocked_transfers:
                await asyncio.Event().wait()
            if index in self.crashing_transfers:
                raise RuntimeError(f"upload {index} crashed")
            status = self.transfer_status.get(index, 204)
            text = "" if status < 300 else f"<Error>upload {index} rejected</Error>"
            return httpx.Response(status, text=text)

        path = request.url.path
        if path == "/api/uploadFiles":
            if self.ticket_status >= 300:
                return httpx.Response(self.ticket_status, json=self.ticket_error)
            payload = json.loads(request.content)
            files = payload["files"]
            count = len(files) + self.ticket_count_delta
            data = [self.ticket_for(i, files[i % len(files)]) for i in range(count)]
            return httpx.Response(200, json={"data": data})

        if path.startswith("/api/pollUpload/"):
            key = path.rsplit("/", 1)[-1]
            if key in self.blocked_polls:
                await asyncio.Event().wait()
            queue = self.poll_statuses.get(key)
            status = queue.pop(0) if queue else self.default_poll_status
            if status == "<broken>":
                return httpx.Response(200, text="not json")
            if status == "<missing>":
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"status": status})

        if path in self.json_responses:
            return httpx.Response(200, json=self.json_responses[path])

        return httpx.Response(404, json={"error": f"no route {path}"})

    @staticmethod
    def ticket_for(index: int, descriptor: dict) -> dict:
        return {
            "key": f"key-{index}",
            "fileUrl": f"https://utfs.test/f/key-{index}",
            "presignedUrl": f"https://{UPLOAD_HOST}/{index}",
            "fields": {
                "key": f"key-{index}",
                "Content-Type": descriptor["type"],
                "policy": "eyJleHBpcmF0aW9uIjoi",
            },
        }


class FakeSleep:
    """Records requested sleeps instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def config():
    return UploadthingConfig(api_key="sk_test_123", host=API_HOST)


@pytest.fixture
def service():
    return FakeUploadthing()


@pytest.fixture
def signal():
    return CancellationSignal()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def poller_factory(fake_sleep):
    return functools.partial(CompletionPoller, sleep=fake_sleep, rng=random.Random(7))


@pytest.fixture
def make_files(tmp_path):
    def _make(*names_and_sizes):
        paths = []
        for name, size in names_and_sizes:
            path = tmp_path / name
            path.write_bytes(b"x" * size)
            paths.append(path)
        return paths
    return _make
