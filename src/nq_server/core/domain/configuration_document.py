from __future__ import annotations

from pydantic import Field

from nq_server.core.constants.api_constants import (
    CONFIG_DOCUMENT_VERSION,
    LARGE_DOWNLOAD_PATH,
    LARGE_DOWNLOAD_URL_KEY,
    SMALL_DOWNLOAD_PATH,
    SMALL_DOWNLOAD_URL_KEY,
    UPLOAD_PATH,
    UPLOAD_URL_KEY,
)
from nq_server.core.domain.base import ValueObject

HTTPS_PORT = 443
HTTP_PORT = 80


class PublicEndpoint(ValueObject):
    """Scheme, hostname and optional port that clients use to reach the server."""

    scheme: str = "http"
    hostname: str = "localhost"
    port: int | None = None

    @classmethod
    def from_listen_port(cls, hostname: str, port: int) -> PublicEndpoint:
        """Derive the public endpoint from the port the server listens on.

        Port 443 implies HTTPS. The well-known ports 80 and 443 are left out
        of rendered URLs.
        """
        scheme = "https" if port == HTTPS_PORT else "http"
        public_port = None if port in (HTTP_PORT, HTTPS_PORT) else port
        return cls(scheme=scheme, hostname=hostname, port=public_port)

    @property
    def base_url(self) -> str:
        if self.port is None:
            return f"{self.scheme}://{self.hostname}"
        return f"{self.scheme}://{self.hostname}:{self.port}"

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"


class ConfigurationDocument(ValueObject):
    """Self-describing document pointing clients at the measurement endpoints."""

    version: int = CONFIG_DOCUMENT_VERSION
    urls: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def for_endpoint(cls, endpoint: PublicEndpoint) -> ConfigurationDocument:
        return cls(
            urls={
                SMALL_DOWNLOAD_URL_KEY: endpoint.url_for(SMALL_DOWNLOAD_PATH),
                LARGE_DOWNLOAD_URL_KEY: endpoint.url_for(LARGE_DOWNLOAD_PATH),
                UPLOAD_URL_KEY: endpoint.url_for(UPLOAD_PATH),
            }
        )

    def to_json(self) -> str:
        """Serialize to compact JSON text."""
        return self.model_dump_json()
