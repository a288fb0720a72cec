"""Asset lifecycle: create, update and delete with coded identity.

Every write that allocates a sequence reads the existing codes and
persists the new rows inside the same ``transaction.atomic()`` block.
Audit entries are recorded after the block commits, best-effort.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db import transaction as db_transaction

from ..exceptions import AssetStoreError
from ..models import Asset
from .bulk import (
    apply_business_values,
    create_bulk_group,
    delete_bulk_group,
    update_bulk_group,
)
from .codes import build_asset_code, structural_key
from .history import record_asset_event, snapshot
from .sequence import next_sequence, next_sequence_range, parse_sequence
from .validation import ensure_category_exists, validate_asset

logger = logging.getLogger(__name__)


def _check_sequence(value, field):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError({field: "Sequence must be a positive integer."})


def _insert(asset, sequence):
    """Code and save a standalone asset. Must run inside atomic()."""
    asset.bulk_id = None
    asset.bulk_sequence = 1
    asset.is_bulk_parent = False
    asset.bulk_total_count = 1
    asset.code = build_asset_code(asset, sequence)
    try:
        asset.save(force_insert=True)
    except DatabaseError as e:
        raise AssetStoreError("create_asset", asset.code, str(e)) from e


def _record_created(asset, metadata):
    logger.info("Created asset %s (%s)", asset.code, asset.pk)
    record_asset_event(
        "create",
        asset.pk,
        new=snapshot(asset),
        description=f"Asset created: {asset.name} ({asset.code})",
        metadata=metadata,
    )


def create_asset(asset, metadata=None):
    """Register a single asset with the next free sequence.

    Raises ValidationError for bad field values and
    ``Category.DoesNotExist`` for an unknown category.
    """
    validate_asset(asset)
    ensure_category_exists(asset.category_id)

    with db_transaction.atomic():
        sequence = next_sequence(Asset.objects.list_all_codes(lock=True))
        _insert(asset, sequence)

    _record_created(asset, metadata)
    return asset


def create_asset_with_sequence(asset, sequence, metadata=None):
    """Register a single asset with a pre-allocated sequence.

    Used by imports after ``get_next_available_sequence_range``. A
    sequence that is already taken under the same code prefix fails on
    the unique code constraint with AssetStoreError.
    """
    _check_sequence(sequence, "sequence")
    validate_asset(asset)
    ensure_category_exists(asset.category_id)

    with db_transaction.atomic():
        _insert(asset, sequence)

    _record_created(asset, metadata)
    return asset


def create_bulk_asset(asset, quantity, metadata=None):
    """Create a bulk group of ``quantity`` identical units."""
    return create_bulk_group(asset, quantity, metadata=metadata)


def create_bulk_asset_with_sequence(asset, quantity, start_sequence, metadata=None):
    _check_sequence(start_sequence, "start_sequence")
    return create_bulk_group(
        asset, quantity, start_sequence=start_sequence, metadata=metadata
    )


def get_asset(asset_id):
    return Asset.objects.get(pk=asset_id)


def get_bulk_assets(bulk_id):
    """Members of a bulk group ordered by bulk_sequence."""
    members = Asset.objects.bulk_members(bulk_id)
    if not members:
        raise Asset.DoesNotExist(f"No assets found for bulk group {bulk_id}.")
    return members


def update_asset(asset, metadata=None):
    """Persist new business values for an existing asset.

    ``asset`` carries the primary key of the row to change plus the new
    values. A bulk member is never updated alone: the values go to the
    whole group, and codes are only regenerated when the change comes
    through the group's parent. Returns the updated row.
    """
    existing = Asset.objects.get(pk=asset.pk)

    if existing.is_bulk_member:
        members = update_bulk_group(
            existing.bulk_id,
            asset.business_values(),
            regenerate_codes=existing.is_bulk_parent,
            metadata=metadata,
        )
        return next(m for m in members if m.pk == existing.pk)

    validate_asset(asset)
    ensure_category_exists(asset.category_id)

    with db_transaction.atomic():
        current = Asset.objects.select_for_update().get(pk=asset.pk)
        old = snapshot(current)
        before = structural_key(current)
        apply_business_values(current, asset.business_values())
        current.quantity = asset.quantity
        if structural_key(current) != before:
            sequence = parse_sequence(current.code)
            if sequence is None:
                logger.warning(
                    "Cannot regenerate malformed code %s", current.code
                )
            else:
                current.code = build_asset_code(current, sequence)
        try:
            current.save()
        except DatabaseError as e:
            raise AssetStoreError("update_asset", current.code, str(e)) from e

    logger.info("Updated asset %s (%s)", current.code, current.pk)
    record_asset_event(
        "update",
        current.pk,
        old=old,
        new=snapshot(current),
        description=f"Asset updated: {current.name} ({current.code})",
        metadata=metadata,
    )
    return current


def update_bulk_assets(bulk_id, values, metadata=None):
    """Update a whole bulk group through its parent.

    Every member's code is rebuilt from the updated fields, keeping
    each member's sequence.
    """
    return update_bulk_group(
        bulk_id, values, regenerate_codes=True, metadata=metadata
    )


def delete_asset(asset_id, metadata=None):
    """Delete a standalone asset.

    Bulk members can only be removed with their whole group.
    """
    asset = Asset.objects.get(pk=asset_id)
    if asset.is_bulk_member:
        raise ValidationError(
            {
                "bulk_id": (
                    f"Asset {asset.code} belongs to bulk group "
                    f"{asset.bulk_id}; delete the whole group instead."
                )
            }
        )

    old = snapshot(asset)
    pk = asset.pk
    with db_transaction.atomic():
        try:
            asset.delete()
        except DatabaseError as e:
            raise AssetStoreError("delete_asset", old.code, str(e)) from e

    logger.info("Deleted asset %s (%s)", old.code, pk)
    record_asset_event(
        "delete",
        pk,
        old=old,
        description=f"Asset deleted: {old.name} ({old.code})",
        metadata=metadata,
    )


def delete_bulk_assets(bulk_id, metadata=None):
    return delete_bulk_group(bulk_id, metadata=metadata)


def get_next_available_sequence_range(count):
    """Start of the first run of ``count`` free sequences.

    Lets an import assign dense, increasing codes to many rows without
    re-reading the codes between rows. Row locks last until the
    outermost transaction commits, so callers must wrap this call and
    the following ``create_*_with_sequence`` calls in one
    ``transaction.atomic()`` block to keep the range reserved.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError({"count": "Count must be a positive integer."})
    with db_transaction.atomic():
        return next_sequence_range(Asset.objects.list_all_codes(lock=True), count)


def recalculate_all_depreciation(as_of=None, batch_size=500):
    """Refresh stored depreciation for every asset as of ``as_of``.

    Returns the number of assets refreshed.
    """
    assets = list(Asset.objects.all())
    for asset in assets:
        asset.refresh_derived_fields(as_of)
    with db_transaction.atomic():
        Asset.objects.bulk_update(
            assets, list(Asset.DERIVED_FIELDS), batch_size=batch_size
        )
    logger.info("Recalculated depreciation for %d assets", len(assets))
    return len(assets)
