"""Checksum-identified chunk content and its disk-backed storage."""

from chunkstore.chunk import Chunk
from chunkstore.chunk_storage import DiskChunkStore
from chunkstore.disk_chunk import DiskChunk
from chunkstore.memory_chunk import MemoryChunk

__all__ = [
    "Chunk",
    "DiskChunk",
    "DiskChunkStore",
    "MemoryChunk",
]
