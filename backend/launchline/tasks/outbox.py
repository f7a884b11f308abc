"""
Outbox dispatch task.
"""
import asyncio

from launchline.core.celery_app import celery_app
from launchline.core.config import settings
from launchline.core.database import close_db, get_db_session_context
from launchline.core.logger import logger
from launchline.modules.eventbus.outbox import OutboxDispatcher
from launchline.modules.eventbus.publisher import EventBusPublisher


@celery_app.task(bind=True)
def dispatch_outbox_events(self, batch_size: int = settings.outbox_batch_size):
    """
    Publish pending domain events from the outbox.
    """
    return asyncio.run(_dispatch_outbox_events_async(batch_size))


async def _dispatch_outbox_events_async(batch_size: int) -> dict:
    """Async implementation of outbox dispatch."""
    publisher = EventBusPublisher()
    try:
        async with get_db_session_context() as session:
            delivered = await OutboxDispatcher(session, publisher).dispatch_pending(batch_size)
        return {"delivered": delivered}
    except Exception as e:
        logger.error("Outbox dispatch failed", error=str(e), exc_info=True)
        raise
    finally:
        await publisher.close()
        # Each asyncio.run gets a fresh loop; pooled connections can't outlive it
        await close_db()
