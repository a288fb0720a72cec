"""Tests for audit snapshots and change-sets."""

import dataclasses
import uuid
from datetime import date
from decimal import Decimal

import pytest

from assets.factories import AssetFactory
from audit.snapshots import AssetSnapshot, FieldChange, diff_snapshots


@pytest.fixture
def built_asset():
    return AssetFactory.build(
        name="Desk",
        code="101.05.1.24.004",
        acquisition_date=date(2024, 2, 1),
        acquisition_price=Decimal("750000"),
        bulk_id=uuid.UUID("12345678-1234-5678-1234-567812345678"),
        bulk_sequence=2,
        bulk_total_count=4,
    )


class TestAssetSnapshot:
    def test_values_are_json_safe(self, built_asset):
        snap = AssetSnapshot.from_asset(built_asset)
        data = snap.as_dict()
        assert data["id"] == str(built_asset.pk)
        assert data["acquisition_date"] == "2024-02-01"
        assert data["acquisition_price"] == "750000.00"
        assert data["bulk_id"] == "12345678-1234-5678-1234-567812345678"
        assert data["bulk_sequence"] == 2

    def test_missing_values(self, built_asset):
        built_asset.acquisition_date = None
        built_asset.bulk_id = None
        data = AssetSnapshot.from_asset(built_asset).as_dict()
        assert data["acquisition_date"] is None
        assert data["bulk_id"] is None

    def test_frozen(self, built_asset):
        snap = AssetSnapshot.from_asset(built_asset)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.name = "Chair"


class TestDiffSnapshots:
    def test_lists_changed_fields(self, built_asset):
        old = AssetSnapshot.from_asset(built_asset)
        built_asset.name = "Standing Desk"
        built_asset.status = "damaged"
        new = AssetSnapshot.from_asset(built_asset)

        changes = diff_snapshots(old, new)
        assert changes == [
            FieldChange("name", "Desk", "Standing Desk"),
            FieldChange("status", "good", "damaged"),
        ]
        assert changes[0].as_dict() == {"from": "Desk", "to": "Standing Desk"}

    def test_identity_ignored(self, built_asset):
        old = AssetSnapshot.from_asset(built_asset)
        new = dataclasses.replace(old, id="other")
        assert diff_snapshots(old, new) == []

    def test_create_and_delete_have_no_changes(self, built_asset):
        snap = AssetSnapshot.from_asset(built_asset)
        assert diff_snapshots(None, snap) == []
        assert diff_snapshots(snap, None) == []

    def test_type_mismatch(self, built_asset):
        snap = AssetSnapshot.from_asset(built_asset)
        with pytest.raises(TypeError):
            diff_snapshots(snap, FieldChange("a", 1, 2))
