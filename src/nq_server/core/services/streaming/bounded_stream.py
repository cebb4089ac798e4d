"""
Bounded chunk stream.

Composes an unbounded `ChunkGenerator` with a take-N limit so that a response
body of a fixed total size is produced lazily, one chunk per pull. Only the
chunk currently being handed to the transport is ever held in memory.
"""

from __future__ import annotations

import asyncio
import logging
import math

from nq_server.core.constants.streaming_constants import CHUNK_SIZE
from nq_server.core.services.streaming.chunk_generator import ChunkGenerator

logger = logging.getLogger(__name__)


class BoundedChunkStream:
    """Async iterator yielding ``ceil(total_size / chunk_size)`` chunks.

    The stream budget (``remaining``) is decremented exactly once per emitted
    chunk and the stream is exhausted when it reaches zero. When ``total_size``
    is not a multiple of ``chunk_size`` the final chunk is truncated so that
    exactly ``total_size`` bytes are emitted.

    A chunk is generated only when the consumer asks for the next one, so a
    consumer that awaits the transport between pulls bounds outstanding
    memory to a single chunk. Every pull also yields to the event loop once,
    so a transport whose writes complete without suspending (for example
    after the peer has gone away) cannot starve other connections or the
    server's disconnect watcher. After `aclose` no further chunk is generated.
    """

    def __init__(
        self,
        total_size: int,
        chunk_size: int = CHUNK_SIZE,
        generator: ChunkGenerator | None = None,
    ) -> None:
        if total_size < 0:
            raise ValueError(f"total_size must not be negative, got {total_size}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.total_size = total_size
        self.chunk_size = chunk_size
        self.chunk_count = math.ceil(total_size / chunk_size)
        self.remaining = self.chunk_count
        self.emitted = 0
        self.bytes_emitted = 0
        self.closed = False
        self._last_chunk_size = total_size - (self.chunk_count - 1) * chunk_size
        self._generator = generator or ChunkGenerator(chunk_size)

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def __aiter__(self) -> BoundedChunkStream:
        return self

    async def __anext__(self) -> bytes:
        if self.closed or self.remaining == 0:
            raise StopAsyncIteration

        await asyncio.sleep(0)
        if self.closed:
            raise StopAsyncIteration

        if self.remaining == 1 and self._last_chunk_size != self.chunk_size:
            chunk = self._generator.next_chunk(self._last_chunk_size)
        else:
            chunk = self._generator.next_chunk()

        self.remaining -= 1
        self.emitted += 1
        self.bytes_emitted += len(chunk)
        return chunk

    async def aclose(self) -> None:
        """Stop the stream; subsequent pulls end the iteration."""
        if self.closed:
            return
        self.closed = True
        if self.remaining:
            logger.debug(
                "Stream closed early after %d of %d chunks",
                self.emitted,
                self.chunk_count,
            )
