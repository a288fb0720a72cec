"""Models for fixed asset registration."""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .services.codes import (
    DEFAULT_PROCUREMENT_SOURCE,
    normalize_procurement_source,
)
from .services.depreciation import calculate_depreciation
from .services.state import STATUS_GOOD, normalize_status


class Category(models.Model):
    """Asset type classification, encoded into every asset code."""

    code = models.CharField(
        max_length=10,
        unique=True,
        help_text="Short numeric code used in asset codes, e.g. '02'",
    )
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"


class Location(models.Model):
    """Physical place where assets are kept."""

    code = models.CharField(
        max_length=10,
        unique=True,
        help_text="Short numeric code used in asset codes, e.g. '101'",
    )
    name = models.CharField(max_length=100)
    building = models.CharField(max_length=100, blank=True)
    floor = models.CharField(max_length=20, blank=True)
    room = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"


class AssetManager(models.Manager):
    """Manager with the lookups used by code allocation and bulk groups."""

    def list_all_codes(self, lock=False):
        """Return every asset code.

        With ``lock=True`` the rows are selected FOR UPDATE, so
        concurrent allocators inside ``transaction.atomic()`` serialise
        on backends that support row locks.
        """
        queryset = self.all()
        if lock:
            queryset = queryset.select_for_update()
        return list(queryset.values_list("code", flat=True))

    def bulk_members(self, bulk_id, lock=False):
        """Return all members of a bulk group ordered by bulk_sequence."""
        queryset = self.filter(bulk_id=bulk_id)
        if lock:
            queryset = queryset.select_for_update()
        return list(queryset.order_by("bulk_sequence"))


class Asset(models.Model):
    """A single fixed asset, or one member of a bulk group."""

    STATUS_CHOICES = [
        ("good", "Good"),
        ("damaged", "Damaged"),
        ("inadequate", "Inadequate"),
    ]

    PROCUREMENT_SOURCE_CHOICES = [
        ("purchase", "Purchase"),
        ("aid", "Aid"),
        ("grant", "Grant"),
        ("donation", "Donation"),
        ("self_produced", "Self-produced"),
    ]

    # Fields shared by every member of a bulk group
    BUSINESS_FIELDS = (
        "name",
        "specification",
        "unit",
        "acquisition_date",
        "acquisition_price",
        "useful_life_years",
        "location_id",
        "category_id",
        "procurement_source",
        "status",
        "description",
    )

    DERIVED_FIELDS = (
        "useful_life_months",
        "accumulated_depreciation",
        "residual_value",
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(
        max_length=50,
        unique=True,
        help_text="Structured code AAA.BB.C.DD.EEE",
    )
    name = models.CharField(max_length=255)
    specification = models.TextField(blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name="assets",
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="assets",
        null=True,
        blank=True,
    )
    procurement_source = models.CharField(
        max_length=20,
        choices=PROCUREMENT_SOURCE_CHOICES,
        default=DEFAULT_PROCUREMENT_SOURCE,
    )
    quantity = models.PositiveIntegerField(
        default=1,
        help_text="Always 1 for bulk group members",
    )
    unit = models.CharField(max_length=50, help_text="Unit of measure")
    acquisition_date = models.DateField()
    acquisition_price = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    useful_life_years = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    useful_life_months = models.PositiveIntegerField(default=0, editable=False)
    accumulated_depreciation = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00"), editable=False
    )
    residual_value = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00"), editable=False
    )
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_GOOD
    )
    description = models.TextField(blank=True)

    bulk_id = models.UUIDField(null=True, blank=True, editable=False)
    bulk_sequence = models.PositiveIntegerField(default=1)
    is_bulk_parent = models.BooleanField(default=False)
    bulk_total_count = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AssetManager()

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["bulk_id", "bulk_sequence"],
                condition=models.Q(bulk_id__isnull=False),
                name="unique_bulk_sequence_per_group",
            ),
            models.UniqueConstraint(
                fields=["bulk_id"],
                condition=models.Q(is_bulk_parent=True),
                name="one_parent_per_bulk_group",
            ),
        ]
        indexes = [
            models.Index(fields=["bulk_id"], name="idx_asset_bulk_id"),
            models.Index(fields=["status"], name="idx_asset_status"),
            models.Index(
                fields=["acquisition_date"],
                name="idx_asset_acquisition_date",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def is_bulk_member(self):
        return self.bulk_id is not None

    def clean(self):
        super().clean()
        if self.bulk_id is not None and self.quantity != 1:
            raise ValidationError(
                {"quantity": "Bulk group members always have quantity 1."}
            )

    def save(self, *args, **kwargs):
        self.refresh_derived_fields()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | set(
                self.DERIVED_FIELDS
            )
        super().save(*args, **kwargs)

    def refresh_derived_fields(self, as_of=None):
        """Normalise enumerations and recompute depreciation.

        Runs on every save; ``bulk_create``/``bulk_update`` callers must
        call it themselves.
        """
        self.status = normalize_status(self.status)
        self.procurement_source = normalize_procurement_source(
            self.procurement_source
        )
        result = calculate_depreciation(
            self.acquisition_price,
            self.useful_life_years,
            self.acquisition_date,
            as_of,
        )
        self.useful_life_months = result.useful_life_months
        self.accumulated_depreciation = result.accumulated
        self.residual_value = result.residual
        return result

    def business_values(self):
        """Return the bulk-shared field values keyed by attribute name."""
        return {field: getattr(self, field) for field in self.BUSINESS_FIELDS}
