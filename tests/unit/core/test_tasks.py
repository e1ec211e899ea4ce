"""Unit tests for the outbox relay task."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.tasks import relay_outbox_events

pytestmark = pytest.mark.unit


def _make_event(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "DiscountCreated",
        "payload": {"name": "Summer"},
        "aggregate_id": "discount-1",
        "topic": "promotions",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class TestRelayOutboxEvents:
    def test_publishes_pending_events(self):
        first = _make_event()
        second = _make_event(aggregate_id="discount-2")

        assert relay_outbox_events() == {"published": 2, "failed": 0}

        for event in (first, second):
            event.refresh_from_db()
            assert event.status == EventStatus.PUBLISHED

    def test_marks_failed_when_publish_raises(self):
        event = _make_event()

        with patch("modules.core.tasks.publish_event", side_effect=ConnectionError("down")):
            assert relay_outbox_events() == {"published": 0, "failed": 1}

        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 1
        assert event.error_message == "down"

    def test_retries_failed_events(self):
        event = _make_event()
        event.mark_as_failed("transient")

        relay_outbox_events()

        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED

    def test_skips_events_that_exhausted_retries(self, settings):
        settings.OUTBOX_MAX_RETRIES = 1
        event = _make_event()
        event.mark_as_failed("permanent")

        assert relay_outbox_events() == {"published": 0, "failed": 0}

    def test_respects_batch_size(self):
        for i in range(3):
            _make_event(aggregate_id=f"discount-{i}")

        assert relay_outbox_events(batch_size=2)["published"] == 2
        assert OutboxEvent.objects.filter(status=EventStatus.PENDING).count() == 1

    def test_runs_through_celery(self):
        from config.celery import app

        assert app.conf.task_always_eager is True
        _make_event()
        result = relay_outbox_events.delay()
        assert result.get() == {"published": 1, "failed": 0}
