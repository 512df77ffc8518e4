"""Collaborator protocols consumed by the download orchestrator."""

from pathlib import PurePath
from typing import Any, List, Protocol, Sequence, runtime_checkable

from common.types import Asset, AssetGroup, AssetID, Snapshot


@runtime_checkable
class BackupAssistant(Protocol):
    """
    Lists and describes the assets of a snapshot.

    ``client`` is the session object of the implementation (for the HTTP
    implementation, an ``httpx.Client``). Failures are I/O-classified
    (OSError) and propagate unchanged.
    """

    def asset_groups(self, client: Any, snapshot: Snapshot) -> List[AssetGroup]:
        """Return the asset groups (one per domain) of a snapshot."""
        ...

    def assets(self, client: Any, asset_ids: Sequence[AssetID]) -> List[Asset]:
        """Return full details for a batch of asset IDs."""
        ...


@runtime_checkable
class DownloadAssistant(Protocol):
    """Transfers asset bytes into persistent storage."""

    def download(self, client: Any, assets: Sequence[Asset], relative_path: PurePath) -> None:
        """Fetch and store the given assets under relative_path."""
        ...
