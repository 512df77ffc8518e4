"""DiskChunk: chunk whose bytes live in a file on local disk."""

import logging
from pathlib import Path
from typing import BinaryIO, Union

from chunkstore.chunk import chunk_equals, write_fully
from common.constants import STREAM_PIECE_SIZE_BYTES

logger = logging.getLogger(__name__)


class DiskChunk:
    """
    Chunk backed by a single file.

    The checksum is fixed at construction. The file is never modified or
    deleted by the chunk; its lifecycle belongs to the storage layer. Every
    read opens its own handle, so any number of threads may read the same
    chunk concurrently.
    """

    __slots__ = ("_checksum", "_file")

    def __init__(self, checksum: Union[bytes, bytearray, memoryview], file: Union[str, Path]):
        """
        Args:
            checksum: Checksum bytes, copied in (may be empty but not None)
            file: Path of the backing file

        Raises:
            TypeError: If checksum or file is None
        """
        if checksum is None:
            raise TypeError("checksum must not be None")
        if file is None:
            raise TypeError("file must not be None")
        self._file = Path(file)
        self._checksum = bytes(checksum)

    @property
    def checksum(self) -> bytes:
        """Checksum bytes. Returned as an immutable copy of the identity."""
        return bytes(self._checksum)

    @property
    def file(self) -> Path:
        """Path of the backing file."""
        return self._file

    def reader(self) -> BinaryIO:
        """
        Open a new read handle on the backing file.

        Returns:
            Binary stream positioned at the start; the caller must close it

        Raises:
            OSError: If the backing file cannot be opened
        """
        return open(self._file, 'rb')

    def copy_to(self, sink: BinaryIO, piece_size: int = STREAM_PIECE_SIZE_BYTES) -> int:
        """
        Stream the full chunk content into sink.

        Args:
            sink: Writable binary stream
            piece_size: Read size for each piece

        Returns:
            Number of bytes written

        Raises:
            OSError: If the backing file is unreadable or the sink rejects writes
        """
        written = 0
        with open(self._file, 'rb') as source:
            while True:
                piece = source.read(piece_size)
                if not piece:
                    break
                write_fully(sink, piece)
                written += len(piece)

        logger.debug(f"copy_to() written (bytes): {written} [chunk={self._checksum.hex()}]")
        return written

    def __eq__(self, other: object) -> bool:
        return chunk_equals(self, other)

    def __hash__(self) -> int:
        return hash(self._checksum)

    def __repr__(self) -> str:
        return f"DiskChunk(checksum={self._checksum.hex()}, file={self._file})"
