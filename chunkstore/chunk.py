"""Chunk capability: immutable, checksum-identified unit of retrieved content."""

from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class Chunk(Protocol):
    """
    Immutable unit of binary content identified by its checksum.

    Any storage medium may back a chunk. Implementations must never expose
    their internal checksum state for mutation, and two chunks with equal
    checksum bytes are interchangeable regardless of where their bytes live.
    """

    @property
    def checksum(self) -> bytes:
        """Checksum bytes identifying this chunk."""
        ...

    def reader(self) -> BinaryIO:
        """Open a fresh, independently positioned stream over the content. Caller closes it."""
        ...

    def copy_to(self, sink: BinaryIO) -> int:
        """Stream the full content to sink and return the number of bytes written."""
        ...


def chunk_equals(chunk: Chunk, other: object) -> bool:
    """
    Checksum-based equality shared by all chunk variants.

    Args:
        chunk: Chunk being compared
        other: Arbitrary object

    Returns:
        True if other is a chunk with the same checksum bytes
    """
    if chunk is other:
        return True
    if not isinstance(other, Chunk):
        return False
    return chunk.checksum == other.checksum


def write_fully(sink: BinaryIO, data: bytes) -> None:
    """
    Write all of data to sink, retrying short writes of raw streams.

    A sink whose write() returns None is taken to have accepted the whole
    piece.

    Raises:
        OSError: If the sink accepts no bytes
    """
    view = memoryview(data)
    while view:
        written = sink.write(view)
        if written is None:
            return
        if written == 0:
            raise OSError(f"Sink accepted no bytes, {len(view)} remaining")
        view = view[written:]
