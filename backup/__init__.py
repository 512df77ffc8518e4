"""Batched, parallel retrieval of backup snapshot content.

The HTTP collaborators live in ``backup.http_client`` and are imported
explicitly, so the core stays free of httpx, pydantic and environment config.
"""

from backup.assistants import BackupAssistant, DownloadAssistant
from backup.backup import Backup
from backup.batcher import batch
from backup.dispatcher import ParallelDispatcher

__all__ = [
    "Backup",
    "BackupAssistant",
    "DownloadAssistant",
    "ParallelDispatcher",
    "batch",
]
