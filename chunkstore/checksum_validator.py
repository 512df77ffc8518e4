"""Provides SHA-256 checksum calculation and verification helpers for chunk content."""

import hashlib


def compute_checksum(data: bytes) -> bytes:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Raw 32-byte SHA-256 digest
    """
    return hashlib.sha256(data).digest()


def verify_checksum(data: bytes, expected: bytes) -> bool:
    """
    Verify that data matches expected checksum.

    Args:
        data: Bytes to verify
        expected: Expected SHA-256 digest

    Returns:
        True if checksum matches, False otherwise
    """
    return compute_checksum(data) == bytes(expected)


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streamed chunk bodies.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(piece1)
        calculator.update(piece2)
        digest = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha256()
        self._finalized = False
        self._bytes_seen = 0

    @property
    def bytes_seen(self) -> int:
        """Number of bytes fed to the calculator."""
        return self._bytes_seen

    def update(self, data: bytes) -> None:
        """
        Update checksum with new data.

        Args:
            data: Bytes to add to checksum calculation

        Raises:
            ValueError: If called after finalize()
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
        self._bytes_seen += len(data)

    def finalize(self) -> bytes:
        """
        Finalize checksum calculation and return result.

        Returns:
            Raw SHA-256 digest
        """
        self._finalized = True
        return self._hasher.digest()
