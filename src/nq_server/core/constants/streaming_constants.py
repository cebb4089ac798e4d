"""Sizing constants for streamed download payloads."""

# 256 KiB per chunk
CHUNK_SIZE = 256 * 1024

# 8 GiB total for the large download: 8 * 4 * 1024 chunks of 256 KiB
LARGE_DOWNLOAD_CHUNK_COUNT = 8 * 4 * 1024
LARGE_DOWNLOAD_SIZE = CHUNK_SIZE * LARGE_DOWNLOAD_CHUNK_COUNT

SMALL_DOWNLOAD_SIZE = 1
