"""Asynchronous tasks of the core module."""

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent

logger = structlog.get_logger(__name__)


def publish_event(event: OutboxEvent) -> None:
    """Hand one outbox row to the downstream consumers.

    Consumers subscribe to the structured log stream by topic.
    """
    logger.info(
        "outbox.event_published",
        topic=event.topic,
        event_type=event.event_type,
        aggregate_id=event.aggregate_id,
        payload=event.payload,
    )


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int | None = None) -> dict:
    """Publish pending outbox events, oldest first.

    Rows that exhausted ``OUTBOX_MAX_RETRIES`` stay ``FAILED`` and are skipped.
    """
    batch_size = batch_size or settings.OUTBOX_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        events = list(
            OutboxEvent.objects.pending()
            .filter(retry_count__lt=settings.OUTBOX_MAX_RETRIES)
            .select_for_update(skip_locked=True)[:batch_size]
        )
        for event in events:
            try:
                publish_event(event)
            except Exception as exc:
                logger.exception("outbox.publish_failed", event_id=str(event.id))
                event.mark_as_failed(str(exc))
                failed += 1
                continue
            event.mark_as_published()
            published += 1

    logger.info("outbox.relay_finished", published=published, failed=failed)
    return {"published": published, "failed": failed}
