"""HTTP adapter for UploadThing API operations."""
from __future__ import annotations

import json as jsonlib
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from ..config import UploadthingConfig
from ..errors import UploadthingAPIError

logger = logging.getLogger(__name__)


def describe_error_body(response: httpx.Response) -> Tuple[str, Any]:
    """Pretty-print a JSON error payload, falling back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text, response.text
    return jsonlib.dumps(body, indent=2), body


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Performs no retries.
    """

    def __init__(
        self,
        config: UploadthingConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> UploadthingConfig:
        return self._config

    async def __aenter__(self):
        self._client = httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        return self._client

    async def post(self, pathname: str, json: Any) -> httpx.Response:
        """
        POST a JSON payload to an API path.

        Raises:
            UploadthingAPIError: non-2xx response; message is the error body
            httpx.HTTPError: transport failure
        """
        client = self._require_client()
        url = self._config.url_for(pathname)
        response = await client.post(url, json=json, headers=self._config.headers())

        if not response.is_success:
            detail, body = describe_error_body(response)
            logger.debug(f"API error {response.status_code} on POST {pathname}: {detail}")
            raise UploadthingAPIError(detail, status_code=response.status_code, body=body)

        return response

    async def post_multipart(
        self,
        url: str,
        data: Mapping[str, str],
        files: Dict[str, Tuple[str, bytes, str]],
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        client = self._require_client()
        return await client.post(
            url,
            data=dict(data),
            files=files,
            headers=headers or self._config.auth_headers(),
        )

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        client = self._require_client()
        return await client.get(url, headers=headers or self._config.auth_headers())
