"""MemoryChunk: chunk held in an in-process bytes buffer."""

import io
from typing import BinaryIO, Union

from chunkstore.chunk import chunk_equals, write_fully


class MemoryChunk:
    """In-memory chunk for small payloads and testing."""

    __slots__ = ("_checksum", "_data")

    def __init__(self, checksum: Union[bytes, bytearray, memoryview], data: Union[bytes, bytearray, memoryview]):
        if checksum is None:
            raise TypeError("checksum must not be None")
        if data is None:
            raise TypeError("data must not be None")
        self._checksum = bytes(checksum)
        self._data = bytes(data)

    @property
    def checksum(self) -> bytes:
        return bytes(self._checksum)

    def reader(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def copy_to(self, sink: BinaryIO) -> int:
        write_fully(sink, self._data)
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        return chunk_equals(self, other)

    def __hash__(self) -> int:
        return hash(self._checksum)

    def __repr__(self) -> str:
        return f"MemoryChunk(checksum={self._checksum.hex()}, size={len(self._data)})"
