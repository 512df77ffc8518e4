"""HTTP collaborators: asset listing, asset details and chunk transfer over httpx."""

import logging
import os
import tempfile
from pathlib import Path, PurePath
from typing import List, Optional, Sequence, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from backup import config
from backup.backup import Backup
from backup.dispatcher import ParallelDispatcher
from backup.schemas import AssetGroupsResponse, AssetsQueryRequest, AssetsQueryResponse
from chunkstore.chunk import Chunk
from chunkstore.chunk_storage import DiskChunkStore
from common.constants import STREAM_PIECE_SIZE_BYTES
from common.exceptions import TransferError
from common.types import Asset, AssetGroup, AssetID, ChunkReference, Snapshot
from common.utils import format_file_size

logger = logging.getLogger(__name__)

SchemaT = TypeVar('SchemaT', bound=BaseModel)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error detail from a JSON error body."""
    try:
        error_data = response.json()
    except ValueError:
        return response.text or 'Unknown error'
    if isinstance(error_data, dict):
        return str(error_data.get('detail', 'Unknown error'))
    return 'Unknown error'


def _request(client: httpx.Client, method: str, url: str, **kwargs) -> httpx.Response:
    """
    Make HTTP request, mapping transport failures and error statuses to TransferError.

    Raises:
        TransferError: On network failure or non-2xx status
    """
    logger.debug(f"Making request: {method} {url}")
    try:
        response = client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.error(f"Network error: {method} {url} error={type(e).__name__}")
        raise TransferError(f"{method} {url} failed: {e}") from e

    if not response.is_success:
        detail = _error_detail(response)
        logger.warning(f"Request failed: {method} {url} status={response.status_code} detail={detail}")
        raise TransferError(f"{method} {url} returned {response.status_code}: {detail}", response.status_code)
    return response


def _parse(schema: Type[SchemaT], response: httpx.Response) -> SchemaT:
    try:
        return schema.model_validate_json(response.content)
    except ValidationError as e:
        raise TransferError(f"Malformed {schema.__name__} from {response.request.url}: {e}") from e


class HttpBackupAssistant:
    """Lists asset groups and fetches asset details from the backup service API."""

    def asset_groups(self, client: httpx.Client, snapshot: Snapshot) -> List[AssetGroup]:
        """
        List the asset groups of a snapshot.

        Args:
            client: HTTP session bound to the backup service
            snapshot: Snapshot to list

        Returns:
            Asset groups in service order

        Raises:
            TransferError: If the request fails or the response is malformed
        """
        response = _request(client, 'GET', f'/snapshots/{snapshot.snapshot_id}/asset-groups')
        payload = _parse(AssetGroupsResponse, response)
        return [group.to_domain() for group in payload.asset_groups]

    def assets(self, client: httpx.Client, asset_ids: Sequence[AssetID]) -> List[Asset]:
        """
        Fetch details for a batch of assets.

        Args:
            client: HTTP session bound to the backup service
            asset_ids: Batch of asset IDs

        Returns:
            Asset details, including chunk references

        Raises:
            TransferError: If the request fails or the response is malformed
        """
        if not asset_ids:
            return []
        request = AssetsQueryRequest(asset_ids=[asset_id.id for asset_id in asset_ids])
        response = _request(client, 'POST', '/assets/query', json=request.model_dump())
        payload = _parse(AssetsQueryResponse, response)
        return [asset.to_domain() for asset in payload.assets]


class ChunkDownloader:
    """
    Transfers asset content chunk by chunk and assembles the asset files.

    Chunks already present in the store are not fetched again. Each asset is
    written to ``<output_root>/<relative_path>/<domain>/<asset path>``.
    """

    def __init__(self, store: DiskChunkStore, output_root: Union[str, Path]):
        """
        Args:
            store: Chunk store receiving fetched chunks
            output_root: Directory receiving assembled asset files
        """
        self.store = store
        self.output_root = Path(output_root)

    def download(self, client: httpx.Client, assets: Sequence[Asset], relative_path: PurePath) -> None:
        """
        Fetch and assemble the given assets.

        Args:
            client: HTTP session used to fetch chunk URLs
            assets: Assets to download
            relative_path: Output sub-path of the snapshot

        Raises:
            TransferError: If a chunk cannot be fetched
            ChunkIntegrityError: If a fetched chunk fails checksum verification
            ValueError: If an asset path resolves outside the output root
        """
        for asset in assets:
            chunks = [self._fetch_chunk(client, reference) for reference in asset.chunks]
            self._assemble(asset, chunks, relative_path)

    def output_path_for(self, asset: Asset, relative_path: PurePath) -> Path:
        """
        Resolve an asset's output file and ensure it stays under the output root.

        Raises:
            ValueError: If the path escapes the output root
        """
        root = self.output_root.resolve()
        candidate = (self.output_root / relative_path / asset.domain / asset.relative_path).resolve()
        try:
            candidate.relative_to(root)
        except ValueError:
            raise ValueError(f"Asset path resolves outside output root: {asset.domain}/{asset.relative_path}")
        return candidate

    def _fetch_chunk(self, client: httpx.Client, reference: ChunkReference) -> Chunk:
        existing = self.store.get(reference.checksum)
        if existing is not None:
            return existing

        logger.debug(f"Fetching chunk {reference.checksum.hex()} ({format_file_size(reference.size)})")
        try:
            with client.stream('GET', reference.url) as response:
                if not response.is_success:
                    response.read()
                    raise TransferError(
                        f"GET {reference.url} returned {response.status_code}: {_error_detail(response)}",
                        response.status_code
                    )
                return self.store.put_stream(
                    reference.checksum,
                    response.iter_bytes(chunk_size=STREAM_PIECE_SIZE_BYTES)
                )
        except httpx.HTTPError as e:
            logger.error(f"Network error fetching chunk {reference.checksum.hex()}: {type(e).__name__}")
            raise TransferError(f"GET {reference.url} failed: {e}") from e

    def _assemble(self, asset: Asset, chunks: Sequence[Chunk], relative_path: PurePath) -> None:
        target = self.output_path_for(asset, relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        written = 0
        try:
            with os.fdopen(fd, 'wb') as f:
                for chunk in chunks:
                    written += chunk.copy_to(f)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        if written != asset.size:
            logger.warning(
                f"Size mismatch for {asset.domain}/{asset.relative_path}: expected {asset.size}, wrote {written}"
            )
        logger.info(f"Downloaded {asset.domain}/{asset.relative_path} ({format_file_size(written)})")


def create_http_backup(
    output_root: Optional[Union[str, Path]] = None,
    chunk_storage_path: Optional[Union[str, Path]] = None,
    threads: Optional[int] = None,
    batch_size: Optional[int] = None
) -> Backup:
    """
    Build a Backup wired to the HTTP collaborators, defaulting to environment config.

    Args:
        output_root: Directory receiving asset files (BACKUP_OUTPUT_PATH)
        chunk_storage_path: Chunk store directory (BACKUP_CHUNK_STORAGE_PATH)
        threads: Batch parallelism (BACKUP_DOWNLOAD_THREADS)
        batch_size: Batch threshold in bytes (BACKUP_BATCH_SIZE_BYTES)

    Returns:
        Configured Backup; pass config.create_http_client() as its client
    """
    store = DiskChunkStore(chunk_storage_path if chunk_storage_path is not None else config.CHUNK_STORAGE_PATH)
    downloader = ChunkDownloader(store, output_root if output_root is not None else config.OUTPUT_PATH)
    return Backup(
        HttpBackupAssistant(),
        downloader,
        dispatcher=ParallelDispatcher(threads if threads is not None else config.DOWNLOAD_THREADS),
        batch_size=batch_size if batch_size is not None else config.BATCH_SIZE_BYTES
    )
