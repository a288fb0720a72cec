"""Best-effort audit recording for asset mutations.

An audit failure is logged and swallowed: a broken audit log must never
block or undo an asset mutation that already committed.
"""

import logging

from audit.services import record_activity
from audit.snapshots import AssetSnapshot

logger = logging.getLogger(__name__)

ENTITY_TYPE = "asset"


def snapshot(asset):
    return AssetSnapshot.from_asset(asset)


def bulk_metadata(asset, metadata=None, **extra):
    """Request metadata plus the asset's bulk group position."""
    data = dict(metadata or {})
    data.update(
        bulk_id=str(asset.bulk_id),
        bulk_sequence=asset.bulk_sequence,
        is_bulk_parent=asset.is_bulk_parent,
    )
    data.update(extra)
    return data


def record_asset_event(
    action, entity_id, old=None, new=None, description="", metadata=None
):
    """Record an audit entry, returning None instead of raising."""
    try:
        return record_activity(
            ENTITY_TYPE,
            entity_id,
            action,
            old=old,
            new=new,
            description=description,
            metadata=metadata,
        )
    except Exception:
        logger.exception(
            "Failed to record %s audit entry for asset %s", action, entity_id
        )
        return None
