"""Bulk groups: identical assets acquired together under one bulk_id.

A group is created with a fixed size and never gains or loses members.
Every member carries quantity 1, its own sequence-coded ``code`` and
its 1-based ``bulk_sequence``; the first member is the parent. Create,
update and delete touch all members inside one atomic block.
"""

import logging
import uuid

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db import transaction as db_transaction

from ..exceptions import AssetStoreError
from ..models import Asset
from .codes import (
    acquisition_year,
    generate_code,
    resolve_category_code,
    resolve_location_code,
    structural_key,
)
from .history import bulk_metadata, record_asset_event, snapshot
from .sequence import next_sequence_range, parse_sequence
from .validation import (
    ensure_category_exists,
    validate_asset,
    validate_bulk_request,
)

logger = logging.getLogger(__name__)

# Relation names accepted in update values, mapped to their attnames
RELATION_FIELDS = {"location": "location_id", "category": "category_id"}


def apply_business_values(asset, values: dict) -> None:
    """Copy shared field values onto ``asset``.

    Keys must be in ``Asset.BUSINESS_FIELDS`` (or ``location`` /
    ``category``). Code, bulk position and quantity cannot be set here.
    """
    unknown = sorted(
        key
        for key in values
        if key not in Asset.BUSINESS_FIELDS and key not in RELATION_FIELDS
    )
    if unknown:
        raise ValidationError(
            {key: "Not a field shared across a bulk group." for key in unknown}
        )
    for field, value in values.items():
        if field in RELATION_FIELDS:
            field = RELATION_FIELDS[field]
            value = getattr(value, "pk", value)
        setattr(asset, field, value)


def create_bulk_group(
    template: Asset,
    quantity: int,
    start_sequence: int | None = None,
    metadata: dict | None = None,
) -> list[Asset]:
    """Create ``quantity`` members from ``template`` as one atomic batch.

    Sequences ``start..start+quantity-1`` are allocated gap-free unless
    ``start_sequence`` is supplied by an import pre-allocation. Returns
    the members ordered by bulk_sequence.
    """
    validate_asset(template, check_quantity=False)
    validate_bulk_request(template, quantity)
    ensure_category_exists(template.category_id)

    bulk_id = uuid.uuid4()
    values = template.business_values()

    with db_transaction.atomic():
        if start_sequence is None:
            start_sequence = next_sequence_range(
                Asset.objects.list_all_codes(lock=True), quantity
            )
        location_code = resolve_location_code(template.location_id)
        category_code = resolve_category_code(template.category_id)

        members = []
        for index in range(quantity):
            member = Asset(
                id=uuid.uuid4(),
                bulk_id=bulk_id,
                bulk_sequence=index + 1,
                is_bulk_parent=index == 0,
                bulk_total_count=quantity,
                quantity=1,
                **values,
            )
            member.refresh_derived_fields()
            member.code = generate_code(
                location_code,
                category_code,
                member.procurement_source,
                acquisition_year(member),
                start_sequence + index,
            )
            members.append(member)

        try:
            Asset.objects.bulk_create(members)
        except DatabaseError as e:
            raise AssetStoreError(
                "create_bulk_group", f"bulk group {bulk_id}", str(e)
            ) from e

    logger.info(
        "Created bulk group %s: %d x %s (%s .. %s)",
        bulk_id,
        quantity,
        template.name,
        members[0].code,
        members[-1].code,
    )
    for member in members:
        record_asset_event(
            "create",
            member.pk,
            new=snapshot(member),
            description=(
                f"Bulk asset created: {member.name} ({member.code}), "
                f"unit {member.bulk_sequence} of {quantity}"
            ),
            metadata=bulk_metadata(member, metadata),
        )
    return members


def update_bulk_group(
    bulk_id,
    values: dict,
    regenerate_codes: bool = False,
    metadata: dict | None = None,
) -> list[Asset]:
    """Apply ``values`` to every member of a bulk group.

    Each member keeps its code, bulk position and quantity 1. When
    ``regenerate_codes`` is set (the parent-only path), every code is
    rebuilt from the updated fields with the member's existing
    sequence, so codes left stale by an earlier non-parent structural
    change are repaired too. Sequences are never reallocated on update.
    """
    with db_transaction.atomic():
        members = Asset.objects.bulk_members(bulk_id, lock=True)
        if not members:
            raise Asset.DoesNotExist(f"No assets found for bulk group {bulk_id}.")

        probe = Asset(**members[0].business_values())
        apply_business_values(probe, values)
        validate_asset(probe, check_quantity=False)
        ensure_category_exists(probe.category_id)

        structure_changed = structural_key(probe) != structural_key(members[0])
        if regenerate_codes:
            location_code = resolve_location_code(probe.location_id)
            category_code = resolve_category_code(probe.category_id)
        elif structure_changed:
            logger.warning(
                "Structural fields of bulk group %s changed outside the "
                "parent path; member codes left unchanged",
                bulk_id,
            )

        old_snapshots = {}
        for member in members:
            old_snapshots[member.pk] = snapshot(member)
            apply_business_values(member, values)
            member.quantity = 1
            # Stored codes may lag the fields after a non-parent
            # structural change
            if regenerate_codes:
                sequence = parse_sequence(member.code)
                if sequence is None:
                    logger.warning(
                        "Cannot regenerate malformed code %s", member.code
                    )
                else:
                    member.code = generate_code(
                        location_code,
                        category_code,
                        member.procurement_source,
                        acquisition_year(member),
                        sequence,
                    )
            try:
                member.save()
            except DatabaseError as e:
                raise AssetStoreError(
                    "update_bulk_group", member.code, str(e)
                ) from e

    logger.info("Updated bulk group %s (%d members)", bulk_id, len(members))
    for member in members:
        record_asset_event(
            "update",
            member.pk,
            old=old_snapshots[member.pk],
            new=snapshot(member),
            description=(
                f"Bulk asset update - Asset {member.code} updated as part "
                f"of bulk ID {bulk_id}"
            ),
            metadata=bulk_metadata(
                member, metadata, update_type="bulk_update"
            ),
        )
    return members


def delete_bulk_group(bulk_id, metadata: dict | None = None) -> list[Asset]:
    """Delete every member of a bulk group in one atomic operation.

    Returns the deleted members as they were before deletion.
    """
    with db_transaction.atomic():
        members = Asset.objects.bulk_members(bulk_id, lock=True)
        if not members:
            raise Asset.DoesNotExist(f"No assets found for bulk group {bulk_id}.")
        old_snapshots = [snapshot(member) for member in members]
        try:
            Asset.objects.filter(bulk_id=bulk_id).delete()
        except DatabaseError as e:
            raise AssetStoreError(
                "delete_bulk_group", f"bulk group {bulk_id}", str(e)
            ) from e

    logger.info("Deleted bulk group %s (%d members)", bulk_id, len(members))
    for member, old in zip(members, old_snapshots):
        record_asset_event(
            "delete",
            member.pk,
            old=old,
            description=(
                f"Bulk asset deleted: {member.name} ({member.code}) as part "
                f"of bulk ID {bulk_id}"
            ),
            metadata=bulk_metadata(member, metadata),
        )

    parent = next((m for m in members if m.is_bulk_parent), members[0])
    record_asset_event(
        "bulk_delete",
        parent.pk,
        old=snapshot(parent),
        description=f"Bulk assets deleted: {len(members)} items",
        metadata=bulk_metadata(
            parent,
            metadata,
            deleted_count=len(members),
            deleted_codes=",".join(m.code for m in members),
        ),
    )
    return members
