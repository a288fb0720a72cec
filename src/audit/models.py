"""Audit log of changes made to registry entities."""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class AuditLogEntry(models.Model):
    """Immutable record of one change to one entity."""

    ACTION_CHOICES = [
        ("create", "Create"),
        ("update", "Update"),
        ("delete", "Delete"),
        ("bulk_delete", "Bulk Delete"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    entity_type = models.CharField(max_length=100)
    entity_id = models.CharField(max_length=64)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    old_values = models.JSONField(null=True, blank=True)
    new_values = models.JSONField(null=True, blank=True)
    changes = models.JSONField(
        null=True,
        blank=True,
        help_text="Field -> {from, to} for updates",
    )
    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    user_id = models.CharField(max_length=100, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = "audit log entries"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["entity_type", "entity_id"],
                name="idx_audit_entity",
            ),
            models.Index(fields=["action"], name="idx_audit_action"),
            models.Index(fields=["created_at"], name="idx_audit_created_at"),
        ]

    def __str__(self):
        return f"{self.entity_type} {self.entity_id} {self.action}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError(
                "Audit log entries are immutable and cannot be modified."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Audit log entries are immutable and cannot be deleted."
        )
