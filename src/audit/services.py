"""Audit recording, history lookup and retention."""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction as db_transaction
from django.utils import timezone

from .models import AuditLogEntry
from .snapshots import diff_snapshots

logger = logging.getLogger(__name__)

VALID_ACTIONS = {choice for choice, _ in AuditLogEntry.ACTION_CHOICES}

# Request context keys stored on their own columns, not in metadata
REQUEST_CONTEXT_KEYS = ("user_id", "ip_address", "user_agent")


def _stringify(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def record_activity(
    entity_type,
    entity_id,
    action,
    old=None,
    new=None,
    description="",
    metadata=None,
):
    """Persist one audit entry and return it.

    ``old``/``new`` are snapshots (see ``audit.snapshots``). The write
    runs in its own savepoint; failures propagate to the caller.
    """
    if action not in VALID_ACTIONS:
        raise ValueError(f"'{action}' is not a valid audit action.")

    metadata = dict(metadata or {})
    context = {key: metadata.pop(key, None) for key in REQUEST_CONTEXT_KEYS}
    changes = diff_snapshots(old, new)

    entry = AuditLogEntry(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        old_values=old.as_dict() if old is not None else None,
        new_values=new.as_dict() if new is not None else None,
        changes={c.field: c.as_dict() for c in changes} or None,
        description=description,
        metadata={k: _stringify(v) for k, v in metadata.items()},
        user_id=str(context["user_id"] or ""),
        ip_address=context["ip_address"] or None,
        user_agent=str(context["user_agent"] or ""),
    )
    with db_transaction.atomic():
        entry.save()
    logger.debug(
        "Recorded %s audit entry for %s %s", action, entity_type, entity_id
    )
    return entry


def get_activity_history(entity_type, entity_id):
    """Audit entries for one entity, newest first."""
    return AuditLogEntry.objects.filter(
        entity_type=entity_type,
        entity_id=str(entity_id),
    ).order_by("-created_at")


def purge_old_entries(retention_days=None, now=None):
    """Delete entries older than the retention window.

    Returns the number of entries removed.
    """
    if retention_days is None:
        retention_days = getattr(settings, "AUDIT_LOG_RETENTION_DAYS", 90)
    if retention_days < 0:
        raise ValueError("Retention days must not be negative.")
    now = now or timezone.now()
    cutoff = now - timedelta(days=retention_days)
    deleted, _ = AuditLogEntry.objects.filter(created_at__lt=cutoff).delete()
    logger.info(
        "Purged %d audit log entries older than %d days",
        deleted,
        retention_days,
    )
    return deleted
