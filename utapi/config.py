"""
Client configuration.

Immutable dataclass built once and shared read-only by every upload task.
"""
import os
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from .errors import ConfigError


VERSION = "0.1.0"

DEFAULT_HOST = "https://uploadthing.com"
API_KEY_ENV = "UPLOADTHING_SECRET"
HOST_ENV = "UPLOADTHING_HOST"

API_KEY_HEADER = "x-uploadthing-api-key"
VERSION_HEADER = "x-uploadthing-version"


@dataclass(frozen=True)
class UploadthingConfig:
    """Immutable configuration for the UploadThing API."""
    api_key: str = field(repr=False)
    host: str = DEFAULT_HOST
    user_agent: str = f"utapi-py/{VERSION}/python"
    version: str = VERSION
    timeout: float = 60.0

    def __post_init__(self):
        if not self.api_key:
            raise ConfigError("API key must not be empty")

    @classmethod
    def from_env(cls, api_key: Optional[str] = None, **overrides) -> "UploadthingConfig":
        """
        Build configuration from the environment.

        Args:
            api_key: Explicit key; falls back to UPLOADTHING_SECRET
            **overrides: Any other field of the config
        """
        key = api_key or os.getenv(API_KEY_ENV)
        if not key:
            raise ConfigError(f"API key not provided and {API_KEY_ENV} is not set")
        host = overrides.pop("host", None) or os.getenv(HOST_ENV) or DEFAULT_HOST
        return cls(api_key=key, host=host.rstrip("/"), **overrides)

    def with_host(self, host: str) -> "UploadthingConfig":
        return replace(self, host=host.rstrip("/"))

    def url_for(self, pathname: str) -> str:
        """Join host and an API path such as ``/api/listFiles``."""
        return f"{self.host.rstrip('/')}/{pathname.lstrip('/')}"

    def auth_headers(self) -> Dict[str, str]:
        # Raw key, no scheme prefix
        return {API_KEY_HEADER: self.api_key}

    def headers(self) -> Dict[str, str]:
        """Headers of the JSON request envelope."""
        return {
            "Content-Type": "application/json",
            "Cache-Control": "no-store",
            "User-Agent": self.user_agent,
            API_KEY_HEADER: self.api_key,
            VERSION_HEADER: self.version,
        }
