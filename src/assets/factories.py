"""Factory Boy factories for asset registry test data."""

from datetime import date
from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from assets.services.codes import generate_code


class CategoryFactory(DjangoModelFactory):
    """Factory for Category model."""

    class Meta:
        model = "assets.Category"
        django_get_or_create = ("code",)

    code = factory.Sequence(lambda n: f"{n % 90 + 10:02d}")
    name = factory.Sequence(lambda n: f"Category {n}")
    description = factory.Faker("sentence")


class LocationFactory(DjangoModelFactory):
    """Factory for Location model."""

    class Meta:
        model = "assets.Location"
        django_get_or_create = ("code",)

    code = factory.Sequence(lambda n: f"{n % 900 + 100:03d}")
    name = factory.Sequence(lambda n: f"Room {n}")
    building = "Main Building"


class AssetFactory(DjangoModelFactory):
    """Factory for standalone Asset rows.

    The code is built from the asset's own location, category, source
    and year with the factory sequence as its last segment. Tests that
    depend on allocation should set ``code`` explicitly or go through
    ``assets.services.lifecycle``.
    """

    class Meta:
        model = "assets.Asset"

    name = factory.Sequence(lambda n: f"Asset {n}")
    specification = ""
    category = factory.SubFactory(CategoryFactory)
    location = factory.SubFactory(LocationFactory)
    procurement_source = "purchase"
    quantity = 1
    unit = "unit"
    acquisition_date = date(2024, 1, 15)
    acquisition_price = Decimal("1200000.00")
    useful_life_years = 5
    status = "good"
    code = factory.LazyAttributeSequence(
        lambda o, n: generate_code(
            o.location.code if o.location else None,
            o.category.code if o.category else None,
            o.procurement_source,
            o.acquisition_date.year if o.acquisition_date else None,
            n + 1,
        )
    )
