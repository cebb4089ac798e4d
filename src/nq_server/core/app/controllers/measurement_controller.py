"""
Measurement controller.

Serves the download and upload endpoints clients time to estimate latency
and bandwidth.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request, Response
from starlette.requests import ClientDisconnect

from nq_server.core.app.dependencies import get_streaming_config
from nq_server.core.common.exceptions import UploadDrainError
from nq_server.core.config.app_config import StreamingConfig
from nq_server.core.constants.streaming_constants import SMALL_DOWNLOAD_SIZE
from nq_server.core.services.streaming.bounded_stream import BoundedChunkStream
from nq_server.core.services.streaming.chunk_generator import ChunkGenerator
from nq_server.core.transport.fastapi.response_adapters import (
    BoundedStreamingResponse,
    empty_response,
    to_bytes_response,
)

logger = logging.getLogger(__name__)


class MeasurementController:
    """Controller for the small download, large download and upload endpoints."""

    def __init__(self, streaming: StreamingConfig) -> None:
        self.streaming = streaming

    def small(self) -> Response:
        """Return a single pseudo-random byte."""
        generator = ChunkGenerator(SMALL_DOWNLOAD_SIZE)
        return to_bytes_response(generator.next_chunk())

    def large(self) -> BoundedStreamingResponse:
        """Stream the configured large payload from a fresh bounded stream."""
        stream = BoundedChunkStream(
            total_size=self.streaming.large_download_size,
            chunk_size=self.streaming.chunk_size,
        )
        return BoundedStreamingResponse(stream, headers={"Cache-Control": "no-store"})

    async def upload(self, request: Request) -> Response:
        """Drain and discard the request body, answering once it is fully read.

        Raises:
            UploadDrainError: If the client goes away before the body ends
        """
        received = 0
        try:
            async for chunk in request.stream():
                received += len(chunk)
        except ClientDisconnect as e:
            raise UploadDrainError(
                "Client disconnected during upload",
                details={"bytes_received": received},
            ) from e

        logger.debug("Drained %d upload bytes", received)
        return empty_response()


def get_measurement_controller(
    streaming: StreamingConfig = Depends(get_streaming_config),
) -> MeasurementController:
    return MeasurementController(streaming)


async def small_download(
    controller: MeasurementController = Depends(get_measurement_controller),
) -> Response:
    return controller.small()


async def large_download(
    controller: MeasurementController = Depends(get_measurement_controller),
) -> Response:
    return controller.large()


async def upload(
    request: Request,
    controller: MeasurementController = Depends(get_measurement_controller),
) -> Response:
    return await controller.upload(request)
