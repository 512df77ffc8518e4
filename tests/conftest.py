"""Shared pytest fixtures for all tests."""

import hashlib
import threading
from datetime import datetime, timezone

import pytest

from chunkstore.chunk_storage import DiskChunkStore
from common.types import Asset, AssetGroup, AssetID, ChunkReference, Device, Snapshot


MB = 1024 * 1024


class RecordingBackupAssistant:
    """In-memory BackupAssistant that records the batches it was asked about."""

    def __init__(self, groups, assets_by_id):
        self.groups = list(groups)
        self.assets_by_id = dict(assets_by_id)
        self.requested_batches = []
        self.listed_snapshots = []
        self._lock = threading.Lock()

    def asset_groups(self, client, snapshot):
        self.listed_snapshots.append(snapshot.snapshot_id)
        return list(self.groups)

    def assets(self, client, asset_ids):
        with self._lock:
            self.requested_batches.append([asset_id.id for asset_id in asset_ids])
        return [self.assets_by_id[asset_id.id] for asset_id in asset_ids]


class RecordingDownloadAssistant:
    """In-memory DownloadAssistant that records each transfer call."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def download(self, client, assets, relative_path):
        with self._lock:
            self.calls.append(([asset.asset_id.id for asset in assets], relative_path))


def make_asset(asset_id: AssetID, domain: str = 'HomeDomain', chunks=()) -> Asset:
    return Asset(
        asset_id=asset_id,
        domain=domain,
        relative_path=f"Library/{asset_id.id}.dat",
        size=asset_id.size,
        chunks=tuple(chunks)
    )


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


@pytest.fixture
def chunk_store(tmp_path):
    """
    Create a chunk store in a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        DiskChunkStore rooted at tmp_path/chunks
    """
    return DiskChunkStore(tmp_path / 'chunks')


@pytest.fixture
def chunk_file(tmp_path):
    """
    Create a chunk backing file with known content.

    Returns:
        Tuple of (path, data)
    """
    data = bytes(range(256)) * 1000
    path = tmp_path / 'sample.chk'
    path.write_bytes(data)
    return path, data


@pytest.fixture
def device():
    """Device listing one snapshot."""
    return Device(device_id='a1b2c3d4e5f6', snapshot_ids=('snap-1',))


@pytest.fixture
def snapshot():
    """Snapshot with an explicit date."""
    return Snapshot(
        snapshot_id='snap-1',
        modification=datetime(2016, 5, 2, 8, 0, tzinfo=timezone.utc),
        date=datetime(2016, 4, 30, 23, 30, tzinfo=timezone.utc)
    )


@pytest.fixture
def example_asset_ids():
    """Four assets of 10, 15, 8 and 1 MB."""
    return [
        AssetID('a', 10 * MB),
        AssetID('b', 15 * MB),
        AssetID('c', 8 * MB),
        AssetID('d', 1 * MB),
    ]


@pytest.fixture
def recording_assistants(example_asset_ids):
    """
    Backup and download assistants over the example assets.

    Returns:
        Tuple of (RecordingBackupAssistant, RecordingDownloadAssistant)
    """
    groups = [
        AssetGroup('HomeDomain', tuple(example_asset_ids[:2])),
        AssetGroup('MediaDomain', tuple(example_asset_ids[2:]) + (AssetID('empty', 0),)),
    ]
    assets = {asset_id.id: make_asset(asset_id) for asset_id in example_asset_ids}
    return RecordingBackupAssistant(groups, assets), RecordingDownloadAssistant()


@pytest.fixture
def chunk_reference():
    """Factory for (ChunkReference, data) pairs served from http://test/chunks/<hex>."""
    def factory(data: bytes):
        checksum = sha256(data)
        return ChunkReference(checksum=checksum, size=len(data), url=f"/chunks/{checksum.hex()}"), data
    return factory


@pytest.fixture
def asset_factory():
    """Factory building an Asset for an AssetID."""
    return make_asset


@pytest.fixture
def assistant_factory():
    """
    Factory building recording assistants from groups and asset details.

    Returns:
        Callable(groups, assets_by_id) -> (RecordingBackupAssistant, RecordingDownloadAssistant)
    """
    def factory(groups, assets_by_id):
        return RecordingBackupAssistant(groups, assets_by_id), RecordingDownloadAssistant()
    return factory
