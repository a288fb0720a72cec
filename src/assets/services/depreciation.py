"""Straight-line monthly depreciation for fixed assets.

Pure functions only. The lifecycle services and ``Asset.save()`` call
these on every create and update so stored depreciation values are
never trusted across edits.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class Depreciation(NamedTuple):
    """Result of a depreciation run for one asset."""

    useful_life_months: int
    months_elapsed: int
    accumulated: Decimal
    residual: Decimal


def round_money(value) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``.

    Day of month is ignored: 2024-01-31 to 2024-02-01 is one month.
    May be negative when ``start`` is after ``end``.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def calculate_depreciation(
    price,
    useful_life_years,
    acquired_on: date | None,
    as_of: date | None = None,
) -> Depreciation:
    """Compute accumulated depreciation and residual value as of a date.

    Elapsed months are clamped to ``0..useful_life_months`` so future
    acquisition dates never depreciate and an asset never depreciates
    past its useful life. When the useful life is zero both monetary
    outputs are zero.
    """
    if as_of is None:
        from django.utils import timezone

        as_of = timezone.localdate()

    useful_life_months = int(useful_life_years or 0) * 12
    if useful_life_months <= 0:
        return Depreciation(0, 0, ZERO, ZERO)

    elapsed = 0
    if acquired_on is not None:
        elapsed = months_between(acquired_on, as_of)
    elapsed = min(max(elapsed, 0), useful_life_months)

    price = Decimal(str(price or 0))
    accumulated = round_money(price * elapsed / useful_life_months)
    residual = round_money(max(price - accumulated, ZERO))
    return Depreciation(useful_life_months, elapsed, accumulated, residual)
