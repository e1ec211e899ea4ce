"""Unit tests for the OutboxEvent model.

Covers:
- Event creation with all required fields and PENDING default.
- ``record()`` serialization of domain event dataclasses.
- ``pending()`` selection for the relay.
- mark_as_published() / mark_as_failed(error) transitions.
"""

from __future__ import annotations

import uuid

import pytest

from modules.catalog.events import ProductVariantsAdded, ProductVariantUpdated
from modules.core.models import EventStatus, OutboxEvent
from modules.promotions.events import DiscountCreated

pytestmark = pytest.mark.unit


def _make_event(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "ProductVariantsAdded",
        "payload": {"variant_ids": ["v-1", "v-2"], "stock_delta": 5},
        "aggregate_id": "product-123",
        "topic": "catalog",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class TestOutboxEventCreation:
    def test_create_event_with_defaults(self):
        event = _make_event()
        event.refresh_from_db()
        assert event.status == EventStatus.PENDING
        assert event.processed_at is None
        assert event.error_message is None
        assert event.retry_count == 0

    def test_id_is_uuid7(self):
        assert _make_event().id.version == 7


class TestOutboxEventRecord:
    def test_record_serializes_domain_event(self):
        aggregate_id = uuid.uuid4()
        event = ProductVariantsAdded(
            aggregate_id=aggregate_id, variant_ids=("a", "b"), stock_delta=5
        )

        row = OutboxEvent.record(event)
        row.refresh_from_db()

        assert row.event_type == "ProductVariantsAdded"
        assert row.aggregate_id == str(aggregate_id)
        assert row.topic == "catalog"
        assert row.payload["variant_ids"] == ["a", "b"]
        assert row.payload["stock_delta"] == 5
        assert row.payload["event_id"] == str(event.event_id)

    def test_record_uses_event_topic(self):
        row = OutboxEvent.record(DiscountCreated(aggregate_id=uuid.uuid4(), name="Summer"))
        assert row.topic == "promotions"

    def test_record_topic_override(self):
        event = ProductVariantUpdated(aggregate_id=uuid.uuid4(), variant_id="v-1")
        assert OutboxEvent.record(event, topic="audit").topic == "audit"


class TestOutboxEventPending:
    def test_pending_includes_failed_and_skips_published(self):
        pending = _make_event()
        failed = _make_event()
        failed.mark_as_failed("boom")
        published = _make_event()
        published.mark_as_published()

        ids = set(OutboxEvent.objects.pending().values_list("id", flat=True))

        assert ids == {pending.id, failed.id}


class TestOutboxEventTransitions:
    def test_mark_as_published(self):
        event = _make_event()
        event.mark_as_published()
        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None

    def test_mark_as_failed_increments_retry(self):
        event = _make_event()
        event.mark_as_failed("Error 1")
        event.mark_as_failed("Error 2")
        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "Error 2"

    def test_str_representation(self):
        result = str(_make_event(aggregate_id="product-456"))
        assert "ProductVariantsAdded" in result
        assert "PENDING" in result
        assert "product-456" in result
