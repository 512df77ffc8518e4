"""Partitions asset identifiers into size-bounded batches."""

import logging
from typing import List, Sequence

from common.types import AssetID, Batch
from common.utils import format_file_size

logger = logging.getLogger(__name__)


def batch(asset_ids: Sequence[AssetID], threshold: int) -> List[Batch]:
    """
    Split asset IDs into ordered batches by cumulative size.

    Each batch is closed as soon as its total size reaches threshold, so a
    batch may overshoot by its last asset and a single oversized asset forms
    a batch of its own. Only the final batch may fall short of threshold.

    Args:
        asset_ids: Asset IDs in source order
        threshold: Cumulative size in bytes at which a batch is closed

    Returns:
        List of non-empty batches whose concatenation equals asset_ids

    Raises:
        ValueError: If threshold is not positive
    """
    if threshold <= 0:
        raise ValueError(f"Batch threshold must be positive, got {threshold}")

    batches: List[Batch] = []
    current: Batch = []
    total = 0

    for asset_id in asset_ids:
        current.append(asset_id)
        total += asset_id.size
        if total >= threshold:
            logger.debug(f"batch() closed batch: {len(current)} assets, {format_file_size(total)}")
            batches.append(current)
            current = []
            total = 0

    if current:
        logger.debug(f"batch() closed final batch: {len(current)} assets, {format_file_size(total)}")
        batches.append(current)

    return batches
