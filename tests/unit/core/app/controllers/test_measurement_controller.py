"""Tests for the small download, large download and upload endpoints."""

import asyncio
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nq_server.core.app.application_builder import build_app
from nq_server.core.app.controllers.measurement_controller import (
    MeasurementController,
)
from nq_server.core.common.exceptions import UploadDrainError
from nq_server.core.config.app_config import (
    AppConfig,
    LoggingConfig,
    StreamingConfig,
)
from nq_server.core.constants.api_constants import (
    LARGE_DOWNLOAD_PATH,
    SMALL_DOWNLOAD_PATH,
    UPLOAD_PATH,
)
from starlette.requests import Request

from tests.conftest import TEST_LARGE_DOWNLOAD_SIZE


def _http_scope(method: str, path: str) -> dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver")],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }


class TestSmallDownload:
    def test_returns_one_byte(self, test_client: TestClient) -> None:
        response = test_client.get(SMALL_DOWNLOAD_PATH)

        assert response.status_code == 200
        assert len(response.content) == 1
        assert response.headers["content-type"] == "application/octet-stream"

    def test_byte_is_random(self, test_client: TestClient) -> None:
        values = {test_client.get(SMALL_DOWNLOAD_PATH).content for _ in range(64)}

        assert len(values) > 1


class TestLargeDownload:
    def test_streams_configured_total_size(self, test_client: TestClient) -> None:
        response = test_client.get(LARGE_DOWNLOAD_PATH)

        assert response.status_code == 200
        assert len(response.content) == TEST_LARGE_DOWNLOAD_SIZE
        assert response.headers["content-type"] == "application/octet-stream"
        assert response.headers["cache-control"] == "no-store"
        assert "content-length" not in response.headers

    def test_each_request_gets_fresh_bytes(self, test_client: TestClient) -> None:
        first = test_client.get(LARGE_DOWNLOAD_PATH).content
        second = test_client.get(LARGE_DOWNLOAD_PATH).content

        assert len(first) == len(second) == TEST_LARGE_DOWNLOAD_SIZE
        assert first != second

    def test_controller_builds_stream_from_config(self) -> None:
        controller = MeasurementController(
            StreamingConfig(chunk_size=100, large_download_size=1050)
        )

        response = controller.large()

        assert response.stream.chunk_size == 100
        assert response.stream.total_size == 1050
        assert response.stream.chunk_count == 11

    @pytest.mark.asyncio
    async def test_concurrent_downloads_complete_independently(
        self, app: FastAPI
    ) -> None:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://testserver"
        ) as client:
            responses = await asyncio.gather(
                *(client.get(LARGE_DOWNLOAD_PATH) for _ in range(4))
            )

        for response in responses:
            assert response.status_code == 200
            assert len(response.content) == TEST_LARGE_DOWNLOAD_SIZE
        assert len({r.content for r in responses}) == 4


class TestUpload:
    @pytest.mark.parametrize("size", [0, 1, 64 * 1024])
    def test_accepts_and_discards_body(self, test_client: TestClient, size: int) -> None:
        response = test_client.post(UPLOAD_PATH, content=b"u" * size)

        assert response.status_code == 200
        assert response.content == b""

    def test_drains_streamed_body(self, test_client: TestClient) -> None:
        sent: list[int] = []

        def body():  # type: ignore[no-untyped-def]
            for _ in range(8):
                sent.append(4096)
                yield b"s" * 4096

        response = test_client.post(UPLOAD_PATH, content=body())

        assert response.status_code == 200
        assert response.content == b""
        assert sum(sent) == 8 * 4096

    @pytest.mark.asyncio
    async def test_reads_whole_body_before_responding(self) -> None:
        controller = MeasurementController(StreamingConfig())
        parts = [b"a" * 10, b"b" * 20, b"c" * 30]
        received: list[int] = []

        async def receive() -> dict[str, Any]:
            body = parts.pop(0)
            received.append(len(body))
            return {"type": "http.request", "body": body, "more_body": bool(parts)}

        response = await controller.upload(Request(_http_scope("POST", UPLOAD_PATH), receive))

        assert received == [10, 20, 30]
        assert response.status_code == 200
        assert response.body == b""

    @pytest.mark.asyncio
    async def test_disconnect_raises_drain_error(self) -> None:
        controller = MeasurementController(StreamingConfig())
        messages = [
            {"type": "http.request", "body": b"partial", "more_body": True},
            {"type": "http.disconnect"},
        ]

        async def receive() -> dict[str, Any]:
            return messages.pop(0)

        with pytest.raises(UploadDrainError) as exc_info:
            await controller.upload(Request(_http_scope("POST", UPLOAD_PATH), receive))

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"bytes_received": 7}

    @pytest.mark.asyncio
    async def test_disconnect_fails_only_that_request(self, app: FastAPI) -> None:
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app(_http_scope("POST", UPLOAD_PATH), receive, send)

        assert sent[0]["type"] == "http.response.start"
        assert sent[0]["status"] == 400
        assert b"UploadDrainError" in sent[1]["body"]


class TestClientDisconnect:
    @pytest.mark.asyncio
    async def test_silent_writes_after_disconnect_stop_the_stream(self) -> None:
        # Request logging off, so no application middleware is installed
        app = build_app(
            AppConfig(
                streaming=StreamingConfig(
                    chunk_size=1024, large_download_size=1024 * 100_000
                ),
                logging=LoggingConfig(request_logging=False),
            )
        )
        client_gone = asyncio.Event()
        request_read = False
        large_messages: list[dict[str, Any]] = []

        async def large_receive() -> dict[str, Any]:
            nonlocal request_read
            if not request_read:
                request_read = True
                return {"type": "http.request", "body": b"", "more_body": False}
            await client_gone.wait()
            return {"type": "http.disconnect"}

        async def large_send(message: dict[str, Any]) -> None:
            # Once the peer is gone the server drops writes without suspending
            large_messages.append(message)
            if len(large_messages) == 5:
                client_gone.set()

        small_messages: list[dict[str, Any]] = []

        async def small_receive() -> dict[str, Any]:
            return {"type": "http.request", "body": b"", "more_body": False}

        async def small_send(message: dict[str, Any]) -> None:
            small_messages.append(message)

        large = asyncio.create_task(
            app(_http_scope("GET", LARGE_DOWNLOAD_PATH), large_receive, large_send)
        )
        await asyncio.wait_for(
            app(_http_scope("GET", SMALL_DOWNLOAD_PATH), small_receive, small_send),
            timeout=5,
        )
        in_flight_when_small_done = len(large_messages)
        await asyncio.wait_for(large, timeout=5)

        assert small_messages[0]["status"] == 200
        assert len(small_messages[1]["body"]) == 1
        assert in_flight_when_small_done < 50
        assert len(large_messages) < 50
        assert all(m.get("more_body", True) for m in large_messages)
