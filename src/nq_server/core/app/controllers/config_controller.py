"""
Configuration controller exposing the self-describing endpoint document.
"""

from __future__ import annotations

from fastapi import Depends, Response

from nq_server.core.app.dependencies import get_public_endpoint
from nq_server.core.domain.configuration_document import (
    ConfigurationDocument,
    PublicEndpoint,
)
from nq_server.core.transport.fastapi.response_adapters import to_config_response


class ConfigController:
    """Controller for the configuration document endpoint."""

    def __init__(self, endpoint: PublicEndpoint) -> None:
        """Initialize the config controller.

        Args:
            endpoint: Public scheme, hostname and port advertised to clients
        """
        self.endpoint = endpoint

    def get_document(self) -> ConfigurationDocument:
        return ConfigurationDocument.for_endpoint(self.endpoint)


async def get_config(
    endpoint: PublicEndpoint = Depends(get_public_endpoint),
) -> Response:
    """Return the configuration document as compact JSON."""
    return to_config_response(ConfigController(endpoint).get_document())
