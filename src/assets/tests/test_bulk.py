"""Tests for bulk group creation, update and deletion."""

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models.signals import post_delete

from assets.exceptions import AssetStoreError
from assets.factories import AssetFactory
from assets.models import Asset, Category
from assets.services.bulk import (
    apply_business_values,
    create_bulk_group,
    delete_bulk_group,
    update_bulk_group,
)
from audit.models import AuditLogEntry


@pytest.mark.django_db
class TestCreateBulkGroup:
    def test_three_units_on_empty_store(self, asset_template):
        members = create_bulk_group(asset_template, 3)

        assert [m.code for m in members] == [
            "101.02.1.24.001",
            "101.02.1.24.002",
            "101.02.1.24.003",
        ]
        assert [m.is_bulk_parent for m in members] == [True, False, False]
        assert all(m.bulk_total_count == 3 for m in members)
        assert Asset.objects.count() == 3

    def test_group_invariants(self, asset_template):
        members = create_bulk_group(asset_template, 5)
        bulk_id = members[0].bulk_id

        stored = Asset.objects.bulk_members(bulk_id)
        assert len(stored) == 5
        assert sum(m.is_bulk_parent for m in stored) == 1
        assert [m.bulk_sequence for m in stored] == [1, 2, 3, 4, 5]
        assert {m.quantity for m in stored} == {1}
        assert {m.bulk_id for m in stored} == {bulk_id}
        assert len({m.code for m in stored}) == 5

    def test_members_share_business_fields(self, asset_template):
        members = create_bulk_group(asset_template, 3)
        values = [m.business_values() for m in Asset.objects.bulk_members(members[0].bulk_id)]
        assert values[0] == values[1] == values[2]
        assert values[0]["name"] == "Laptop"

    def test_each_member_gets_depreciation(self, asset_template):
        members = create_bulk_group(asset_template, 2)
        for member in members:
            member.refresh_from_db()
            assert member.useful_life_months == 60
            assert (
                member.accumulated_depreciation + member.residual_value
                == Decimal("12000000.00")
            )

    def test_range_skips_broken_run(self, asset_template, category, location):
        for sequence in (1, 2, 5):
            AssetFactory(
                category=category,
                location=location,
                code=f"101.02.1.24.{sequence:03d}",
            )
        members = create_bulk_group(asset_template, 3)
        assert [m.code[-3:] for m in members] == ["006", "007", "008"]

    def test_fills_gap_wide_enough(self, asset_template, category, location):
        for sequence in (1, 2, 6):
            AssetFactory(
                category=category,
                location=location,
                code=f"101.02.1.24.{sequence:03d}",
            )
        members = create_bulk_group(asset_template, 3)
        assert [m.code[-3:] for m in members] == ["003", "004", "005"]

    def test_measured_unit_rejected_before_write(self, asset_template):
        asset_template.unit = "meter"
        with pytest.raises(ValidationError):
            create_bulk_group(asset_template, 5)
        assert Asset.objects.count() == 0
        assert AuditLogEntry.objects.count() == 0

    def test_quantity_one_rejected(self, asset_template):
        with pytest.raises(ValidationError):
            create_bulk_group(asset_template, 1)
        assert Asset.objects.count() == 0

    def test_unknown_category_raises_not_found(self, asset_template):
        asset_template.category_id = 999999
        with pytest.raises(Category.DoesNotExist):
            create_bulk_group(asset_template, 2)
        assert Asset.objects.count() == 0

    def test_invalid_price_rejected(self, asset_template):
        asset_template.acquisition_price = Decimal("0")
        with pytest.raises(ValidationError):
            create_bulk_group(asset_template, 2)

    def test_preallocated_start_sequence(self, asset_template):
        members = create_bulk_group(asset_template, 2, start_sequence=40)
        assert [m.code for m in members] == ["101.02.1.24.040", "101.02.1.24.041"]

    def test_store_failure_persists_nothing(self, asset_template):
        with patch.object(
            Asset.objects, "bulk_create", side_effect=DatabaseError("disk full")
        ):
            with pytest.raises(AssetStoreError) as exc_info:
                create_bulk_group(asset_template, 3)
        assert exc_info.value.operation == "create_bulk_group"
        assert isinstance(exc_info.value.__cause__, DatabaseError)
        assert Asset.objects.count() == 0

    def test_one_create_entry_per_member(self, asset_template):
        members = create_bulk_group(asset_template, 3)
        entries = AuditLogEntry.objects.filter(action="create")
        assert entries.count() == 3
        entry = entries.get(entity_id=str(members[1].pk))
        assert entry.metadata["bulk_id"] == str(members[0].bulk_id)
        assert entry.metadata["bulk_sequence"] == "2"
        assert entry.metadata["is_bulk_parent"] == "false"
        assert entry.new_values["code"] == members[1].code

    def test_audit_failure_does_not_abort(self, asset_template):
        with patch(
            "assets.services.history.record_activity",
            side_effect=DatabaseError("audit down"),
        ):
            members = create_bulk_group(asset_template, 2)
        assert Asset.objects.filter(bulk_id=members[0].bulk_id).count() == 2


@pytest.mark.django_db
class TestUpdateBulkGroup:
    def test_values_propagate_codes_kept(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id
        before = {m.pk: (m.code, m.bulk_sequence) for m in bulk_group}

        update_bulk_group(
            bulk_id,
            {
                "name": "Laptop Pro",
                "specification": "16GB RAM",
                "status": "damaged",
                "acquisition_price": Decimal("15000000.00"),
            },
        )

        for member in Asset.objects.bulk_members(bulk_id):
            assert member.name == "Laptop Pro"
            assert member.specification == "16GB RAM"
            assert member.status == "damaged"
            assert member.acquisition_price == Decimal("15000000.00")
            assert (member.code, member.bulk_sequence) == before[member.pk]
            assert member.quantity == 1
            assert member.bulk_total_count == 3

    def test_depreciation_recomputed(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id
        update_bulk_group(bulk_id, {"acquisition_date": date(2999, 1, 1)})
        for member in Asset.objects.bulk_members(bulk_id):
            assert member.accumulated_depreciation == Decimal("0.00")
            assert member.residual_value == member.acquisition_price

    def test_structural_change_regenerates_codes(
        self, bulk_group, other_location
    ):
        bulk_id = bulk_group[0].bulk_id
        update_bulk_group(
            bulk_id,
            {"location": other_location, "procurement_source": "grant"},
            regenerate_codes=True,
        )
        codes = [m.code for m in Asset.objects.bulk_members(bulk_id)]
        assert codes == [
            "205.02.3.24.001",
            "205.02.3.24.002",
            "205.02.3.24.003",
        ]

    def test_structural_change_without_regeneration_keeps_codes(
        self, bulk_group, other_category
    ):
        bulk_id = bulk_group[0].bulk_id
        update_bulk_group(bulk_id, {"category_id": other_category.pk})
        members = Asset.objects.bulk_members(bulk_id)
        assert {m.category_id for m in members} == {other_category.pk}
        assert [m.code for m in members] == [m.code for m in bulk_group]

    def test_regeneration_without_field_change_fixes_stale_codes(
        self, bulk_group, other_category
    ):
        bulk_id = bulk_group[0].bulk_id
        update_bulk_group(bulk_id, {"category_id": other_category.pk})
        update_bulk_group(bulk_id, {"name": "Laptop"}, regenerate_codes=True)
        codes = [m.code for m in Asset.objects.bulk_members(bulk_id)]
        assert codes == [
            "101.05.1.24.001",
            "101.05.1.24.002",
            "101.05.1.24.003",
        ]

    def test_rejects_non_shared_fields(self, bulk_group):
        with pytest.raises(ValidationError) as exc_info:
            update_bulk_group(
                bulk_group[0].bulk_id, {"code": "X", "bulk_sequence": 9}
            )
        assert set(exc_info.value.message_dict) == {"bulk_sequence", "code"}

    def test_invalid_values_leave_group_unchanged(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id
        with pytest.raises(ValidationError):
            update_bulk_group(bulk_id, {"name": "New", "useful_life_years": 0})
        assert {m.name for m in Asset.objects.bulk_members(bulk_id)} == {"Laptop"}

    def test_unknown_group(self, db):
        with pytest.raises(Asset.DoesNotExist):
            update_bulk_group(uuid.uuid4(), {"name": "x"})

    def test_failure_mid_batch_rolls_back(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id
        original_save = Asset.save

        def failing_save(self, *args, **kwargs):
            if self.bulk_sequence == 3:
                raise DatabaseError("connection lost")
            return original_save(self, *args, **kwargs)

        with patch.object(Asset, "save", failing_save):
            with pytest.raises(AssetStoreError):
                update_bulk_group(bulk_id, {"name": "Renamed"})

        assert {m.name for m in Asset.objects.bulk_members(bulk_id)} == {"Laptop"}

    def test_one_update_entry_per_member(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id
        update_bulk_group(bulk_id, {"name": "Renamed"}, metadata={"user_id": 7})

        entries = AuditLogEntry.objects.filter(action="update")
        assert entries.count() == 3
        for entry in entries:
            assert entry.changes["name"] == {"from": "Laptop", "to": "Renamed"}
            assert entry.metadata["update_type"] == "bulk_update"
            assert entry.metadata["bulk_id"] == str(bulk_id)
            assert entry.user_id == "7"
            assert str(bulk_id) in entry.description


@pytest.mark.django_db
class TestDeleteBulkGroup:
    def test_deletes_all_members(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id
        deleted = delete_bulk_group(bulk_id)
        assert len(deleted) == 3
        assert not Asset.objects.filter(bulk_id=bulk_id).exists()

    def test_audit_entries(self, bulk_group):
        parent = bulk_group[0]
        delete_bulk_group(parent.bulk_id)

        assert AuditLogEntry.objects.filter(action="delete").count() == 3
        summary = AuditLogEntry.objects.get(action="bulk_delete")
        assert summary.entity_id == str(parent.pk)
        assert summary.metadata["deleted_count"] == "3"
        assert summary.description == "Bulk assets deleted: 3 items"

    def test_failure_mid_batch_deletes_nothing(self, bulk_group):
        bulk_id = bulk_group[0].bulk_id

        def fail_on_second(sender, instance, **kwargs):
            if instance.bulk_sequence == 2:
                raise DatabaseError("connection lost")

        post_delete.connect(fail_on_second, sender=Asset)
        try:
            with pytest.raises(AssetStoreError):
                delete_bulk_group(bulk_id)
        finally:
            post_delete.disconnect(fail_on_second, sender=Asset)

        assert Asset.objects.filter(bulk_id=bulk_id).count() == 3
        assert not AuditLogEntry.objects.filter(action="delete").exists()

    def test_unknown_group(self, db):
        with pytest.raises(Asset.DoesNotExist):
            delete_bulk_group(uuid.uuid4())


class TestApplyBusinessValues:
    def test_relation_names_map_to_ids(self):
        asset = AssetFactory.build()
        apply_business_values(asset, {"location": None, "category": 12})
        assert asset.location_id is None
        assert asset.category_id == 12
