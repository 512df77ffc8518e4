"""Shared data type definitions (AssetID, AssetGroup, Asset, Device, Snapshot, etc.)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class AssetID:
    """
    Sized reference to one backed up file awaiting retrieval.

    The size is only used as the batching weight.
    """
    id: str
    size: int

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"Asset size must be >= 0, got {self.size} for {self.id}")


Batch = List[AssetID]


@dataclass(frozen=True)
class AssetGroup:
    """
    Asset identifiers of one backup domain within a snapshot.
    """
    domain: str
    asset_ids: Tuple[AssetID, ...] = ()

    def non_empty(self) -> List[AssetID]:
        """
        Identifiers of assets that carry content.

        Returns:
            Asset IDs with size > 0, in listing order
        """
        return [asset_id for asset_id in self.asset_ids if asset_id.size > 0]


@dataclass(frozen=True)
class ChunkReference:
    """
    Location and checksum of one chunk of an asset's content.
    """
    checksum: bytes
    size: int
    url: str


@dataclass(frozen=True)
class Asset:
    """
    Full details for one asset, as returned by the item detail fetch.
    """
    asset_id: AssetID
    domain: str
    relative_path: str
    size: int
    chunks: Tuple[ChunkReference, ...] = ()


@dataclass(frozen=True)
class Device:
    """
    Backed up device and the snapshots it lists.
    """
    device_id: str
    snapshot_ids: Tuple[str, ...] = ()
    name: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """
    Point-in-time backup of a device.

    ``date`` is the explicit snapshot date when the service reports one;
    ``modification`` is always present.
    """
    snapshot_id: str
    modification: datetime
    date: Optional[datetime] = field(default=None)
