"""Typed before/after snapshots and change-sets for audit entries."""

from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal


def _money(value):
    if value is None:
        return None
    return str(
        Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    )


def _optional_str(value):
    return None if value is None else str(value)


@dataclass(frozen=True)
class AssetSnapshot:
    """JSON-safe copy of an asset's audited fields at one point in time."""

    id: str
    code: str
    name: str
    specification: str
    category_id: int | None
    location_id: int | None
    procurement_source: str
    quantity: int
    unit: str
    acquisition_date: str | None
    acquisition_price: str | None
    useful_life_years: int | None
    useful_life_months: int
    accumulated_depreciation: str | None
    residual_value: str | None
    status: str
    description: str
    bulk_id: str | None
    bulk_sequence: int
    is_bulk_parent: bool
    bulk_total_count: int

    @classmethod
    def from_asset(cls, asset):
        acquired = asset.acquisition_date
        return cls(
            id=str(asset.pk),
            code=asset.code,
            name=asset.name,
            specification=asset.specification,
            category_id=asset.category_id,
            location_id=asset.location_id,
            procurement_source=asset.procurement_source,
            quantity=asset.quantity,
            unit=asset.unit,
            acquisition_date=acquired.isoformat() if acquired else None,
            acquisition_price=_money(asset.acquisition_price),
            useful_life_years=asset.useful_life_years,
            useful_life_months=asset.useful_life_months,
            accumulated_depreciation=_money(asset.accumulated_depreciation),
            residual_value=_money(asset.residual_value),
            status=asset.status,
            description=asset.description,
            bulk_id=_optional_str(asset.bulk_id),
            bulk_sequence=asset.bulk_sequence,
            is_bulk_parent=asset.is_bulk_parent,
            bulk_total_count=asset.bulk_total_count,
        )

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class FieldChange:
    """One field whose value differs between two snapshots."""

    field: str
    old: object
    new: object

    def as_dict(self):
        return {"from": self.old, "to": self.new}


IGNORED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def diff_snapshots(old, new):
    """Return the list of FieldChange between two snapshots.

    Both snapshots must be of the same type. The identity field is not
    compared.
    """
    if old is None or new is None:
        return []
    if type(old) is not type(new):
        raise TypeError(
            f"Cannot diff {type(old).__name__} against {type(new).__name__}"
        )
    changes = []
    for f in fields(old):
        if f.name in IGNORED_FIELDS:
            continue
        before = getattr(old, f.name)
        after = getattr(new, f.name)
        if before != after:
            changes.append(FieldChange(f.name, before, after))
    return changes
