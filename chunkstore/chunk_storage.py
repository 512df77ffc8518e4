"""Manages chunk files on disk: checksum-verified writes, lookup and deletion."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

from chunkstore.checksum_validator import IncrementalChecksumCalculator, compute_checksum, verify_checksum
from chunkstore.disk_chunk import DiskChunk
from common.constants import CHUNK_FILE_SUFFIX
from common.exceptions import ChunkIntegrityError

logger = logging.getLogger(__name__)


class DiskChunkStore:
    """
    Content-addressed chunk storage under a root directory.

    Chunks are stored as ``<root>/<hex[:2]>/<hex>.chk``. The store owns the
    lifecycle of these files; the DiskChunk instances it hands out only read
    them. Writes go through a temporary file and an atomic rename, so
    concurrent batch tasks storing the same chunk do not corrupt each other.
    """

    def __init__(self, root: Union[str, Path]):
        """
        Initialize with a root directory, creating it if needed.

        Args:
            root: Directory holding the chunk files
        """
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def path_for(self, checksum: bytes) -> Path:
        """
        Get file path for a chunk.

        Args:
            checksum: Chunk checksum bytes

        Returns:
            Path object for chunk file

        Raises:
            ValueError: If checksum is empty
        """
        hex_checksum = bytes(checksum).hex()
        if not hex_checksum:
            raise ValueError("Cannot address a chunk with an empty checksum")
        return self._root / hex_checksum[:2] / f"{hex_checksum}{CHUNK_FILE_SUFFIX}"

    def contains(self, checksum: bytes) -> bool:
        """
        Check if chunk file exists on disk.

        Args:
            checksum: Chunk checksum bytes

        Returns:
            True if chunk file exists, False otherwise
        """
        return self.path_for(checksum).exists()

    def get(self, checksum: bytes) -> Optional[DiskChunk]:
        """
        Look up a stored chunk.

        Args:
            checksum: Chunk checksum bytes

        Returns:
            DiskChunk over the stored file, or None if absent
        """
        path = self.path_for(checksum)
        if not path.exists():
            return None
        return DiskChunk(checksum, path)

    def put(self, checksum: bytes, data: bytes) -> DiskChunk:
        """
        Verify and store chunk data.

        Args:
            checksum: Expected SHA-256 digest of data
            data: Raw chunk data

        Returns:
            DiskChunk over the stored file

        Raises:
            ChunkIntegrityError: If data does not match checksum
            OSError: If write operation fails
        """
        if not verify_checksum(data, checksum):
            raise ChunkIntegrityError(checksum, compute_checksum(data))
        return self._store(checksum, [data])

    def put_stream(self, checksum: bytes, pieces: Iterable[bytes]) -> DiskChunk:
        """
        Verify and store chunk data arriving in pieces.

        The pieces are written to a temporary file while hashing; the file
        is only moved into place once the digest matches.

        Args:
            checksum: Expected SHA-256 digest of the concatenated pieces
            pieces: Iterable of byte strings

        Returns:
            DiskChunk over the stored file

        Raises:
            ChunkIntegrityError: If the streamed data does not match checksum
            OSError: If write operation fails
        """
        return self._store(checksum, pieces)

    def _store(self, checksum: bytes, pieces: Iterable[bytes]) -> DiskChunk:
        path = self.path_for(checksum)
        existing = self.get(checksum)
        if existing is not None:
            logger.debug(f"Chunk already stored, reusing [chunk={path.stem}]")
            return existing

        path.parent.mkdir(parents=True, exist_ok=True)
        calculator = IncrementalChecksumCalculator()
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'wb') as f:
                for piece in pieces:
                    calculator.update(piece)
                    f.write(piece)

            actual = calculator.finalize()
            if actual != bytes(checksum):
                raise ChunkIntegrityError(checksum, actual)

            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Stored chunk [chunk={path.stem}, bytes={calculator.bytes_seen}]")
        return DiskChunk(checksum, path)

    def delete(self, checksum: bytes) -> bool:
        """
        Delete chunk file from disk.

        Args:
            checksum: Chunk checksum bytes

        Returns:
            True if file was deleted, False if it didn't exist
        """
        path = self.path_for(checksum)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def list_checksums(self) -> List[bytes]:
        """
        List the checksums of all stored chunks.

        Returns:
            Checksum bytes, sorted by hex value
        """
        checksums = []
        for path in sorted(self._root.glob(f"*/*{CHUNK_FILE_SUFFIX}")):
            try:
                checksums.append(bytes.fromhex(path.stem))
            except ValueError:
                logger.warning(f"Ignoring unexpected file in chunk store: {path}")
        return checksums
