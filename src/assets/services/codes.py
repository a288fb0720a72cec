"""Structured asset code generation.

Codes have the form ``AAA.BB.C.DD.EEE``: location code, category code,
procurement source code, two-digit acquisition year and a zero-padded
sequence. Generation never raises; missing or broken reference data
falls back to configured defaults so it cannot block asset creation.
"""

import logging

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.utils import timezone

from .sequence import CODE_SEPARATOR

logger = logging.getLogger(__name__)

LOCATION_CODE_WIDTH = 3
CATEGORY_CODE_WIDTH = 2
YEAR_WIDTH = 2
SEQUENCE_WIDTH = 3

DEFAULT_PROCUREMENT_SOURCE = "purchase"

PROCUREMENT_SOURCE_CODES = {
    "purchase": "1",
    "aid": "2",
    "grant": "3",
    "donation": "4",
    "self_produced": "5",
}

# Values sent by older clients
PROCUREMENT_SOURCE_ALIASES = {
    "pembelian": "purchase",
    "bantuan": "aid",
    "hibah": "grant",
    "sumbangan": "donation",
    "produksi_sendiri": "self_produced",
}


def normalize_procurement_source(value) -> str:
    """Map free-form input onto a procurement source key.

    Unrecognised or empty input falls back to ``purchase``.
    """
    key = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
    key = PROCUREMENT_SOURCE_ALIASES.get(key, key)
    if key in PROCUREMENT_SOURCE_CODES:
        return key
    return DEFAULT_PROCUREMENT_SOURCE


def procurement_code(value) -> str:
    return PROCUREMENT_SOURCE_CODES[normalize_procurement_source(value)]


def default_location_code() -> str:
    return getattr(settings, "ASSET_DEFAULT_LOCATION_CODE", "001")


def default_category_code() -> str:
    return getattr(settings, "ASSET_DEFAULT_CATEGORY_CODE", "10")


def _fixed_width(value, width: int) -> str:
    """Zero-pad to ``width``; longer values keep their rightmost digits.

    Codes that differ only in their leading digits collapse onto the
    same segment, e.g. locations "1101" and "101" both give "101".
    """
    return str(value).strip().zfill(width)[-width:]


def generate_code(
    location_code,
    category_code,
    procurement_source,
    acquisition_year,
    sequence: int,
) -> str:
    """Build an ``AAA.BB.C.DD.EEE`` asset code from its components."""
    if not str(location_code or "").strip():
        location_code = default_location_code()
    if not str(category_code or "").strip():
        category_code = default_category_code()
    if acquisition_year is None:
        acquisition_year = timezone.localdate().year

    return CODE_SEPARATOR.join(
        [
            _fixed_width(location_code, LOCATION_CODE_WIDTH),
            _fixed_width(category_code, CATEGORY_CODE_WIDTH),
            procurement_code(procurement_source),
            f"{int(acquisition_year) % 100:0{YEAR_WIDTH}d}",
            f"{int(sequence):0{SEQUENCE_WIDTH}d}",
        ]
    )


def resolve_location_code(location_id) -> str:
    """Look up a location's code, defaulting when absent or missing."""
    if location_id is None:
        return default_location_code()

    from ..models import Location

    try:
        location = Location.objects.get(pk=location_id)
    except (ObjectDoesNotExist, ValidationError, ValueError, TypeError):
        logger.warning(
            "Location %s not found, using default location code", location_id
        )
        return default_location_code()
    return location.code or default_location_code()


def resolve_category_code(category_id) -> str:
    """Look up a category's code, defaulting when absent or missing."""
    if category_id is None:
        return default_category_code()

    from ..models import Category

    try:
        category = Category.objects.get(pk=category_id)
    except (ObjectDoesNotExist, ValidationError, ValueError, TypeError):
        logger.warning(
            "Category %s not found, using default category code", category_id
        )
        return default_category_code()
    return category.code or default_category_code()


def acquisition_year(asset):
    if asset.acquisition_date is None:
        return None
    return asset.acquisition_date.year


def build_asset_code(asset, sequence: int) -> str:
    """Generate the code for ``asset`` with the given sequence."""
    return generate_code(
        resolve_location_code(asset.location_id),
        resolve_category_code(asset.category_id),
        asset.procurement_source,
        acquisition_year(asset),
        sequence,
    )


def structural_key(asset) -> tuple:
    """The asset fields that are encoded into its code."""
    return (
        asset.location_id,
        asset.category_id,
        normalize_procurement_source(asset.procurement_source),
        acquisition_year(asset),
    )
