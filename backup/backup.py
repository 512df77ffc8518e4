"""Download orchestrator: ties asset listing, batching and parallel dispatch together."""

import logging
import threading
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Callable, Iterable, List, Mapping, Optional

from backup.assistants import BackupAssistant, DownloadAssistant
from backup.batcher import batch
from backup.dispatcher import ParallelDispatcher
from common.constants import BATCH_SIZE_BYTES
from common.types import Asset, AssetGroup, AssetID, Batch, Device, Snapshot

logger = logging.getLogger(__name__)

AssetGroupFilter = Callable[[AssetGroup], bool]
AssetFilter = Callable[[Asset], bool]


def _to_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


class Backup:
    """
    Retrieves the content of backup snapshots.

    For each snapshot the asset list is filtered, split into batches of
    roughly ``batch_size`` bytes and handed to the dispatcher, which runs
    one detail-fetch/filter/transfer task per batch.
    """

    def __init__(
        self,
        backup_assistant: BackupAssistant,
        download_assistant: DownloadAssistant,
        dispatcher: Optional[ParallelDispatcher] = None,
        batch_size: int = BATCH_SIZE_BYTES
    ):
        """
        Args:
            backup_assistant: Lists asset groups and fetches asset details
            download_assistant: Transfers asset content to storage
            dispatcher: Batch executor (defaults to a single-threaded one)
            batch_size: Cumulative asset size in bytes at which a batch is closed
        """
        if backup_assistant is None:
            raise TypeError("backup_assistant must not be None")
        if download_assistant is None:
            raise TypeError("download_assistant must not be None")
        self.backup_assistant = backup_assistant
        self.download_assistant = download_assistant
        self.dispatcher = dispatcher or ParallelDispatcher()
        self.batch_size = batch_size

    def download(
        self,
        client: Any,
        snapshots: Mapping[Device, Iterable[Snapshot]],
        assets_filter: AssetGroupFilter,
        asset_filter: AssetFilter,
        cancel_event: Optional[threading.Event] = None
    ) -> None:
        """
        Download every snapshot of every device.

        Once cancel_event is set, remaining batches and snapshots are skipped
        and the call returns normally.

        Args:
            client: Session passed through to the collaborators
            snapshots: Snapshots to download, keyed by device
            assets_filter: Predicate selecting asset groups (domains)
            asset_filter: Predicate selecting individual assets
            cancel_event: Optional cancellation token shared with the batch tasks

        Raises:
            OSError: First I/O failure while listing or transferring
            DispatchFatalError: First unexpected failure in a batch task
        """
        for device, device_snapshots in snapshots.items():
            for snapshot in device_snapshots:
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(f"download() cancelled before snapshot: {snapshot.snapshot_id}")
                    return
                self.download_snapshot(client, device, snapshot, assets_filter, asset_filter, cancel_event)

    def download_snapshot(
        self,
        client: Any,
        device: Device,
        snapshot: Snapshot,
        assets_filter: AssetGroupFilter,
        asset_filter: AssetFilter,
        cancel_event: Optional[threading.Event] = None
    ) -> None:
        """
        Download the assets of one snapshot.

        Args:
            client: Session passed through to the collaborators
            device: Device owning the snapshot
            snapshot: Snapshot to download
            assets_filter: Predicate selecting asset groups (domains)
            asset_filter: Predicate selecting individual assets
            cancel_event: Optional cancellation token; batches not yet started
                when it is set are skipped
        """
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"download_snapshot() cancelled: {snapshot.snapshot_id}")
            return

        asset_groups = self.backup_assistant.asset_groups(client, snapshot)
        logger.debug(f"download() asset group count: {len(asset_groups)}")

        asset_groups = [group for group in asset_groups if assets_filter(group)]
        logger.debug(f"download() asset groups filtered count: {len(asset_groups)}")

        relative_path = self.device_snapshot_subpath(device, snapshot)
        logger.info(f"download() snapshot relative path: {relative_path}")

        # Empty assets are skipped here, they carry no content to fetch.
        asset_ids: List[AssetID] = [
            asset_id
            for group in asset_groups
            for asset_id in group.non_empty()
        ]

        batches = batch(asset_ids, self.batch_size)
        logger.info(f"download() assets: {len(asset_ids)}, batches: {len(batches)}")

        self.dispatcher.dispatch(
            batches,
            lambda asset_batch: self._download_batch(client, asset_batch, asset_filter, relative_path),
            cancel_event=cancel_event
        )

    def _download_batch(
        self,
        client: Any,
        asset_batch: Batch,
        asset_filter: AssetFilter,
        relative_path: PurePosixPath
    ) -> None:
        logger.debug(f"_download_batch() batch: {[asset_id.id for asset_id in asset_batch]}")
        assets = [asset for asset in self.backup_assistant.assets(client, asset_batch) if asset_filter(asset)]
        logger.debug(f"_download_batch() filtered asset count: {len(assets)}")
        self.download_assistant.download(client, assets, relative_path)

    def device_snapshot_subpath(self, device: Device, snapshot: Snapshot) -> PurePosixPath:
        """
        Output sub-path for a snapshot: ``<DEVICE_ID>/<YYYYMMDD>``.

        The date is the snapshot date when present, otherwise its last
        modification, taken in UTC.

        Args:
            device: Device owning the snapshot
            snapshot: Snapshot being downloaded

        Returns:
            Relative path
        """
        if snapshot.snapshot_id not in device.snapshot_ids:
            logger.warning(
                f"Snapshot not listed by device: snapshot={snapshot.snapshot_id} device={device.device_id}"
            )
        timestamp = snapshot.date if snapshot.date is not None else snapshot.modification
        date = _to_utc(timestamp).strftime("%Y%m%d")
        return PurePosixPath(device.device_id.upper()) / date
