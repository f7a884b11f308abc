"""
Transactional outbox.

``enqueue_event`` records an event in the caller's transaction.
``OutboxDispatcher`` later publishes pending rows to the event bus.
Delivery is at-least-once: a row is marked dispatched only after a
successful publish, so a crash in between republishes it.
"""
import json
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from launchline.core.config import get_settings
from launchline.core.exceptions import ExternalServiceException
from launchline.core.logger import get_logger
from launchline.core.metrics import outbox_dispatch_duration, record_outbox_event
from launchline.core.models import utc_now

from .events import DomainEvent, topic_for
from .models import OutboxEvent
from .publisher import EventBusPublisher

logger = get_logger(__name__)


def enqueue_event(session: AsyncSession, event: DomainEvent) -> OutboxEvent:
    """Add ``event`` to the outbox. The caller owns the transaction."""
    settings = get_settings()
    row = OutboxEvent(
        id=event.id,
        event_type=event.event_type.value,
        topic=topic_for(event, settings.event_bus_channel_prefix),
        payload=event.model_dump(mode="json"),
    )
    session.add(row)

    logger.debug("Event enqueued", event_id=event.id, event_type=row.event_type, topic=row.topic)
    return row


class OutboxDispatcher:
    """Publishes pending outbox rows."""

    def __init__(
        self,
        db: AsyncSession,
        publisher: EventBusPublisher,
        max_attempts: Optional[int] = None,
    ):
        self.db = db
        self.publisher = publisher
        self.max_attempts = max_attempts if max_attempts is not None else get_settings().outbox_max_attempts

    async def dispatch_pending(self, batch_size: Optional[int] = None) -> int:
        """
        Publish one batch of pending events, oldest first.

        Rows are locked with ``SKIP LOCKED`` so concurrent dispatchers work on
        disjoint batches.

        Returns:
            Number of events delivered
        """
        batch_size = batch_size or get_settings().outbox_batch_size
        start_time = time.time()

        stmt = (
            select(OutboxEvent)
            .where(
                OutboxEvent.dispatched_at.is_(None),
                OutboxEvent.attempts < self.max_attempts,
            )
            .order_by(OutboxEvent.created_at.asc(), OutboxEvent.id.asc())
            .limit(batch_size)
            .with_for_update(skip_locked=True)
        )
        result = await self.db.execute(stmt)
        rows = result.scalars().all()

        delivered = 0
        failed = 0
        for row in rows:
            try:
                await self.publisher.publish(row.topic, json.dumps(row.payload))
            except ExternalServiceException as e:
                row.attempts += 1
                row.last_error = e.message
                failed += 1
                log = logger.error if row.attempts >= self.max_attempts else logger.warning
                log(
                    "Outbox event publish failed",
                    event_id=row.id,
                    event_type=row.event_type,
                    attempts=row.attempts,
                    error=e.message,
                )
                continue

            row.dispatched_at = utc_now()
            row.last_error = None
            delivered += 1

        await self.db.commit()

        record_outbox_event("dispatched", delivered)
        record_outbox_event("failed", failed)
        outbox_dispatch_duration.observe(time.time() - start_time)

        if rows:
            logger.info("Outbox batch dispatched", delivered=delivered, failed=failed)

        return delivered
