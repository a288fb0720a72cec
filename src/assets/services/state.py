"""Asset condition status normalisation."""

import logging

logger = logging.getLogger(__name__)

STATUS_GOOD = "good"
STATUS_DAMAGED = "damaged"
STATUS_INADEQUATE = "inadequate"

VALID_STATUSES = (STATUS_GOOD, STATUS_DAMAGED, STATUS_INADEQUATE)

# Deprecated values still sent by older clients
LEGACY_STATUS_MAP = {
    "available": STATUS_GOOD,
    "disposed": STATUS_DAMAGED,
    "in_use": STATUS_INADEQUATE,
    "maintenance": STATUS_INADEQUATE,
    "baik": STATUS_GOOD,
    "rusak": STATUS_DAMAGED,
    "tidak_memadai": STATUS_INADEQUATE,
}


def normalize_status(status) -> str:
    """Coerce any status value onto good/damaged/inadequate.

    Never raises: unknown values become ``good``.
    """
    value = str(status or "").strip().lower()
    if value in VALID_STATUSES:
        return value
    normalized = LEGACY_STATUS_MAP.get(value, STATUS_GOOD)
    if value:
        logger.debug("Normalised status %r to %r", status, normalized)
    return normalized
