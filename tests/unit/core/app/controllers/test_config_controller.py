"""Tests for the configuration document endpoint."""

import json

import pytest
from fastapi.testclient import TestClient
from nq_server.core.app.application_builder import build_app
from nq_server.core.app.controllers.config_controller import ConfigController
from nq_server.core.config.app_config import AppConfig
from nq_server.core.constants.api_constants import CONFIG_PATH
from nq_server.core.domain.configuration_document import (
    ConfigurationDocument,
    PublicEndpoint,
)


def test_serves_compact_document(test_client: TestClient) -> None:
    response = test_client.get(CONFIG_PATH)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.text == (
        '{"version":1,"urls":{'
        '"small_download_url":"http://speed.example.test:8080/api/v1/small",'
        '"large_download_url":"http://speed.example.test:8080/api/v1/large",'
        '"upload_url":"http://speed.example.test:8080/api/v1/upload"}}'
    )


def test_document_shape(test_client: TestClient) -> None:
    document = test_client.get(CONFIG_PATH).json()

    assert document["version"] == 1
    assert set(document["urls"]) == {
        "small_download_url",
        "large_download_url",
        "upload_url",
    }
    assert document["urls"]["small_download_url"].endswith("/api/v1/small")
    assert document["urls"]["large_download_url"].endswith("/api/v1/large")
    assert document["urls"]["upload_url"].endswith("/api/v1/upload")


def test_repeated_requests_are_identical(test_client: TestClient) -> None:
    first = test_client.get(CONFIG_PATH).content
    second = test_client.get(CONFIG_PATH).content

    assert first == second


@pytest.mark.parametrize(
    ("port", "base_url"),
    [
        (443, "https://speed.example.test"),
        (80, "http://speed.example.test"),
        (3000, "http://speed.example.test:3000"),
    ],
)
def test_scheme_and_port_follow_listen_port(port: int, base_url: str) -> None:
    app = build_app(AppConfig(hostname="speed.example.test", port=port))

    with TestClient(app) as client:
        urls = client.get(CONFIG_PATH).json()["urls"]

    assert urls["upload_url"] == f"{base_url}/api/v1/upload"


def test_controller_builds_document_from_endpoint() -> None:
    endpoint = PublicEndpoint(scheme="https", hostname="nq.test", port=8443)

    document = ConfigController(endpoint).get_document()

    assert isinstance(document, ConfigurationDocument)
    assert document.urls["large_download_url"] == "https://nq.test:8443/api/v1/large"
    assert json.loads(document.to_json()) == document.model_dump()
