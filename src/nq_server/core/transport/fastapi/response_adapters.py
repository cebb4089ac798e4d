"""
FastAPI response adapters.

This module contains adapters for converting domain objects and streams
to FastAPI/Starlette response objects.
"""

from __future__ import annotations

from collections.abc import Mapping

from fastapi.responses import PlainTextResponse, Response
from starlette.responses import StreamingResponse
from starlette.types import Send

from nq_server.core.common.logging_utils import get_logger
from nq_server.core.constants.api_constants import OCTET_STREAM_MEDIA_TYPE
from nq_server.core.constants.http_status_constants import HTTP_404_NOT_FOUND_MESSAGE
from nq_server.core.domain.configuration_document import ConfigurationDocument
from nq_server.core.services.streaming.bounded_stream import BoundedChunkStream


class BoundedStreamingResponse(StreamingResponse):
    """Streaming response backed by a `BoundedChunkStream`.

    Each chunk is awaited through ``send`` before the next one is pulled, so
    the transport's flow control governs generation. No Content-Length is
    declared; framing is left to the server. The stream is closed however
    the response ends, including client disconnects and task cancellation.
    """

    def __init__(
        self,
        stream: BoundedChunkStream,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        media_type: str | None = OCTET_STREAM_MEDIA_TYPE,
    ) -> None:
        super().__init__(
            stream, status_code=status_code, headers=headers, media_type=media_type
        )
        self.stream = stream
        self._log = get_logger("stream")

    async def stream_response(self, send: Send) -> None:
        try:
            await super().stream_response(send)
        finally:
            completed = self.stream.exhausted
            await self.stream.aclose()
            self._log.info(
                "Stream completed" if completed else "Stream aborted",
                chunks=self.stream.emitted,
                bytes=self.stream.bytes_emitted,
                remaining=self.stream.remaining,
            )


def to_config_response(document: ConfigurationDocument) -> Response:
    """Render the configuration document as a JSON response."""
    return Response(content=document.to_json(), media_type="application/json")


def to_bytes_response(content: bytes) -> Response:
    return Response(content=content, media_type=OCTET_STREAM_MEDIA_TYPE)


def empty_response(status_code: int = 200) -> Response:
    return Response(status_code=status_code)


def not_found_response() -> PlainTextResponse:
    return PlainTextResponse(HTTP_404_NOT_FOUND_MESSAGE, status_code=404)
