"""Field validation for asset create/update and bulk requests.

All checks run before any database write and raise Django's
``ValidationError`` with a field -> message dict.
"""

from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError

DEFAULT_BULK_ELIGIBLE_UNITS = ("unit", "pcs", "piece", "set", "buah")


def bulk_eligible_units():
    return tuple(
        getattr(
            settings, "ASSET_BULK_ELIGIBLE_UNITS", DEFAULT_BULK_ELIGIBLE_UNITS
        )
    )


def _positive_decimal(value):
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not number.is_finite() or number <= 0:
        return None
    return number


def _positive_int(value):
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if number <= 0:
        return None
    return number


def validate_asset(asset, check_quantity=True):
    """Validate the caller-supplied fields of an asset.

    Raises ValidationError listing every invalid field.
    """
    errors = {}
    if not str(asset.name or "").strip():
        errors["name"] = "Name is required."
    if not str(asset.unit or "").strip():
        errors["unit"] = "Unit is required."
    if asset.category_id is None:
        errors["category"] = "Category is required."
    if asset.acquisition_date is None:
        errors["acquisition_date"] = "Acquisition date is required."
    if _positive_decimal(asset.acquisition_price) is None:
        errors["acquisition_price"] = "Acquisition price must be greater than 0."
    if _positive_int(asset.useful_life_years) is None:
        errors["useful_life_years"] = "Useful life must be at least 1 year."
    if check_quantity and _positive_int(asset.quantity) is None:
        errors["quantity"] = "Quantity must be at least 1."
    if errors:
        raise ValidationError(errors)


def validate_bulk_request(template, quantity):
    """Check a bulk creation request: quantity > 1, discrete unit."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError({"quantity": "Quantity must be an integer."})
    if quantity <= 1:
        raise ValidationError(
            {"quantity": "Bulk creation requires a quantity greater than 1."}
        )

    eligible = bulk_eligible_units()
    unit = str(template.unit or "").strip().lower()
    if unit not in eligible:
        raise ValidationError(
            {
                "unit": (
                    f"Bulk asset creation is not allowed for unit "
                    f"'{template.unit}'. Only allowed for: "
                    f"{', '.join(eligible)}."
                )
            }
        )


def ensure_category_exists(category_id):
    """Return the referenced category.

    A missing reference is a validation error; an unknown id raises
    ``Category.DoesNotExist``.
    """
    from ..models import Category

    if category_id is None:
        raise ValidationError({"category": "Category is required."})
    return Category.objects.get(pk=category_id)
