"""
Protocols (Interfaces) for Dependency Inversion.

The upload core only needs "send this, get back a status and a body".
"""
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, runtime_checkable

import httpx


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for the transport used by every service."""

    async def post(self, pathname: str, json: Any) -> httpx.Response:
        """POST a JSON envelope to an API path; raises on non-2xx."""
        ...

    async def post_multipart(
        self,
        url: str,
        data: Mapping[str, str],
        files: Dict[str, Tuple[str, bytes, str]],
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """POST a multipart form to an absolute URL; returns any status."""
        ...

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """GET an absolute URL; returns any status."""
        ...
