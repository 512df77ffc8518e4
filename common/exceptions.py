"""Custom exception classes for snapshot retrieval."""

from typing import Optional


class BackupError(Exception):
    """
    Base exception class for all retrieval errors.
    """
    pass


class TransferError(BackupError, ConnectionError):
    """
    Raised when the transport fails to list, describe or fetch backup content.

    Subclasses ConnectionError so it is classified as an I/O failure.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChunkIntegrityError(BackupError, OSError):
    """
    Raised when chunk bytes do not match their expected checksum.
    """

    def __init__(self, expected: bytes, actual: bytes):
        self.expected = bytes(expected)
        self.actual = bytes(actual)
        super().__init__(
            f"Chunk checksum mismatch: expected {self.expected.hex()}, got {self.actual.hex()}"
        )


class DispatchFatalError(BackupError):
    """
    Raised when a batch task fails with an unexpected, non-I/O error.

    The original exception is chained as __cause__. Never retried.
    """
    pass
