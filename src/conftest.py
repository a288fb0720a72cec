"""Shared pytest fixtures for asset registry tests."""

from datetime import date
from decimal import Decimal

import pytest

from assets.factories import AssetFactory, CategoryFactory, LocationFactory


@pytest.fixture
def category(db):
    return CategoryFactory(code="02", name="Office Equipment")


@pytest.fixture
def other_category(db):
    return CategoryFactory(code="05", name="Furniture")


@pytest.fixture
def location(db):
    return LocationFactory(code="101", name="Admin Office", floor="1")


@pytest.fixture
def other_location(db):
    return LocationFactory(code="205", name="Laboratory", floor="2")


@pytest.fixture
def as_of():
    return date(2026, 1, 15)


@pytest.fixture
def asset_template(category, location):
    """Unsaved asset carrying caller-supplied values."""
    return AssetFactory.build(
        name="Laptop",
        specification="14 inch, 16GB RAM",
        category=category,
        location=location,
        unit="unit",
        acquisition_date=date(2024, 1, 15),
        acquisition_price=Decimal("12000000.00"),
        useful_life_years=5,
        code="",
    )


@pytest.fixture
def asset(category, location):
    return AssetFactory(
        name="Projector",
        category=category,
        location=location,
        code="101.02.1.24.900",
    )


@pytest.fixture
def bulk_group(asset_template):
    from assets.services.lifecycle import create_bulk_asset

    return create_bulk_asset(asset_template, 3)
