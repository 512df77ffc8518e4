"""Configuration settings for snapshot retrieval, read from the environment."""

import os
from pathlib import Path

import httpx

from common.constants import (
    BATCH_SIZE_BYTES as DEFAULT_BATCH_SIZE_BYTES,
    DEFAULT_API_URL,
    DEFAULT_CHUNK_STORAGE_PATH,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_THREADS,
)


API_URL = os.environ.get("BACKUP_API_URL", DEFAULT_API_URL)

BATCH_SIZE_BYTES = int(os.environ.get("BACKUP_BATCH_SIZE_BYTES", str(DEFAULT_BATCH_SIZE_BYTES)))

DOWNLOAD_THREADS = int(os.environ.get("BACKUP_DOWNLOAD_THREADS", str(DEFAULT_THREADS)))

CHUNK_STORAGE_PATH = Path(os.environ.get("BACKUP_CHUNK_STORAGE_PATH", DEFAULT_CHUNK_STORAGE_PATH))

OUTPUT_PATH = Path(os.environ.get("BACKUP_OUTPUT_PATH", DEFAULT_OUTPUT_PATH))

HTTP_TIMEOUT = float(os.environ.get("BACKUP_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SECONDS)))


def create_http_client(**kwargs) -> httpx.Client:
    """
    Build the HTTP session used by the HTTP collaborators.

    Args:
        **kwargs: Overrides passed to httpx.Client (e.g. headers, transport)

    Returns:
        httpx.Client bound to API_URL with HTTP_TIMEOUT
    """
    kwargs.setdefault('base_url', API_URL)
    kwargs.setdefault('timeout', HTTP_TIMEOUT)
    return httpx.Client(**kwargs)
