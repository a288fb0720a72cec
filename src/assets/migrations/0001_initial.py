import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        help_text="Short numeric code used in asset codes, e.g. '02'",
                        max_length=10,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Location",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        help_text="Short numeric code used in asset codes, e.g. '101'",
                        max_length=10,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                ("building", models.CharField(blank=True, max_length=100)),
                ("floor", models.CharField(blank=True, max_length=20)),
                ("room", models.CharField(blank=True, max_length=50)),
                ("description", models.TextField(blank=True)),
            ],
            options={
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Asset",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        help_text="Structured code AAA.BB.C.DD.EEE",
                        max_length=50,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("specification", models.TextField(blank=True)),
                (
                    "procurement_source",
                    models.CharField(
                        choices=[
                            ("purchase", "Purchase"),
                            ("aid", "Aid"),
                            ("grant", "Grant"),
                            ("donation", "Donation"),
                            ("self_produced", "Self-produced"),
                        ],
                        default="purchase",
                        max_length=20,
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Always 1 for bulk group members",
                    ),
                ),
                (
                    "unit",
                    models.CharField(help_text="Unit of measure", max_length=50),
                ),
                ("acquisition_date", models.DateField()),
                (
                    "acquisition_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=15,
                        validators=[
                            django.core.validators.MinValueValidator(
                                decimal.Decimal("0.01")
                            )
                        ],
                    ),
                ),
                (
                    "useful_life_years",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "useful_life_months",
                    models.PositiveIntegerField(default=0, editable=False),
                ),
                (
                    "accumulated_depreciation",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        editable=False,
                        max_digits=15,
                    ),
                ),
                (
                    "residual_value",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        editable=False,
                        max_digits=15,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("good", "Good"),
                            ("damaged", "Damaged"),
                            ("inadequate", "Inadequate"),
                        ],
                        default="good",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "bulk_id",
                    models.UUIDField(blank=True, editable=False, null=True),
                ),
                ("bulk_sequence", models.PositiveIntegerField(default=1)),
                ("is_bulk_parent", models.BooleanField(default=False)),
                ("bulk_total_count", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="assets.category",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="assets.location",
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["bulk_id"], name="idx_asset_bulk_id"),
                    models.Index(fields=["status"], name="idx_asset_status"),
                    models.Index(
                        fields=["acquisition_date"],
                        name="idx_asset_acquisition_date",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("bulk_id__isnull", False)),
                        fields=("bulk_id", "bulk_sequence"),
                        name="unique_bulk_sequence_per_group",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("is_bulk_parent", True)),
                        fields=("bulk_id",),
                        name="one_parent_per_bulk_group",
                    ),
                ],
            },
        ),
    ]
