"""Base abstract models and domain infrastructure for the merchandising backend.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``AuditedModel``: Extends BaseModel with ``created_by`` / ``modified_by``.
- ``StatusSoftDeleteModel``: Audited model soft-deleted through its
  ``status`` column (``deleted``), never physically removed.
- ``OutboxEvent``: Transactional Outbox for domain events produced by the
  catalog and promotions services.

Design decisions:
- Soft delete is a status transition, so "deleted" is one value of the
  aggregate's own status choices instead of a separate ``deleted_at`` column.
- ``objects`` manager returns ALL records (unfiltered).  Use ``.alive()``
  explicitly to exclude soft-deleted rows.
- ``save()`` guard ensures ``updated_at`` is included when ``update_fields``
  is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import uuid6
from django.conf import settings
from django.db import models
from django.utils import timezone

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Audit fields
# ---------------------------------------------------------------------------


class AuditedModel(BaseModel):
    """Abstract base recording which user created and last modified a row.

    ``updated_at`` doubles as the modification timestamp.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        abstract = True

    def stamp_created(self, user_id: Any) -> None:
        self.created_by_id = user_id

    def stamp_modified(self, user_id: Any) -> None:
        """Record *user_id* as the last modifier; ``updated_at`` follows on save."""
        self.modified_by_id = user_id


# ---------------------------------------------------------------------------
# Soft delete via status
# ---------------------------------------------------------------------------

DELETED_STATUS = "deleted"


class StatusSoftDeleteQuerySet(models.QuerySet):
    """QuerySet with soft-delete helpers keyed on ``status``."""

    def alive(self) -> StatusSoftDeleteQuerySet:
        """Return only non-deleted records."""
        return self.exclude(status=DELETED_STATUS)

    def delete(self) -> tuple[int, dict[str, int]]:
        """Bulk soft-delete: sets ``status`` + ``updated_at``."""
        count = self.alive().update(status=DELETED_STATUS, updated_at=timezone.now())
        return count, {self.model._meta.label: count}


class StatusSoftDeleteManager(models.Manager):
    """Manager that exposes ``.alive()`` on the queryset."""

    def get_queryset(self) -> StatusSoftDeleteQuerySet:
        return StatusSoftDeleteQuerySet(self.model, using=self._db)

    def alive(self) -> StatusSoftDeleteQuerySet:
        return self.get_queryset().alive()


class StatusSoftDeleteModel(AuditedModel):
    """Abstract aggregate root soft-deleted by moving ``status`` to ``deleted``.

    Concrete models declare the ``status`` field with their own choices;
    the choices must include ``deleted``.
    """

    objects = StatusSoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.status == DELETED_STATUS

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        """Soft-delete this instance (no-op if already deleted)."""
        if self.is_deleted:
            return 0, {}
        self.status = DELETED_STATUS
        self.save(update_fields=["status", "updated_at"])
        return 1, {self._meta.label: 1}


# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxEventQuerySet(models.QuerySet):
    def pending(self) -> OutboxEventQuerySet:
        """Events still waiting for the relay, oldest first."""
        return self.filter(
            status__in=[EventStatus.PENDING, EventStatus.FAILED]
        ).order_by("created_at")


class OutboxEvent(BaseModel):
    """Domain event persisted in the same transaction as the aggregate.

    Repositories call ``OutboxEvent.record(event)`` while saving
    an aggregate; the ``core.relay_outbox_events`` task later publishes
    ``PENDING`` (and retryable ``FAILED``) rows.
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxEventQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["event_type"],
                name="outbox_event_type_idx",
            ),
            models.Index(
                fields=["aggregate_id"],
                name="outbox_aggregate_id_idx",
            ),
            models.Index(
                fields=["status", "created_at"],
                name="outbox_status_created_idx",
            ),
        ]

    @classmethod
    def record(cls, event: Any, topic: Optional[str] = None) -> OutboxEvent:
        """Persist a ``DomainEvent`` dataclass as a pending outbox row.

        The topic defaults to the event class's own ``topic``.
        """
        return cls.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=_serialize_event_payload(event),
            topic=topic or event.topic,
        )

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_as_published(self) -> None:
        """Mark event as successfully published."""
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.save(update_fields=["status", "processed_at", "updated_at"])

    def mark_as_failed(self, error: str) -> None:
        """Mark event as failed and record the error."""
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(
            update_fields=[
                "status",
                "error_message",
                "retry_count",
                "updated_at",
            ]
        )

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"


def _serialize_event_payload(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
