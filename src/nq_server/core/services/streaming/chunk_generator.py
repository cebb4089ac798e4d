"""Pseudo-random chunk source for streamed payloads."""

from __future__ import annotations

import os
import random

from nq_server.core.constants.streaming_constants import CHUNK_SIZE

SEED_BYTES = 32


class ChunkGenerator:
    """Produce fixed-size buffers of pseudo-random bytes.

    Every instance owns its own PRNG seeded from the OS entropy source, so
    concurrent streams never share random state. The output is not meant to
    be cryptographically secure, only cheap and not trivially compressible.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, seed: bytes | None = None) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self._rng = random.Random(seed if seed is not None else os.urandom(SEED_BYTES))

    def next_chunk(self, size: int | None = None) -> bytes:
        """Return a new buffer of ``size`` bytes (defaults to ``chunk_size``)."""
        return self._rng.randbytes(self.chunk_size if size is None else size)
