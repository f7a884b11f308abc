"""
Redis event bus publisher.
"""
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from launchline.core.config import get_settings
from launchline.core.exceptions import ExternalServiceException
from launchline.core.logger import get_logger

logger = get_logger(__name__)


class EventBusPublisher:
    """Publishes serialized events on Redis pub/sub channels."""

    def __init__(self, client: Optional[redis.Redis] = None):
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(get_settings().redis_url)
        return self._client

    async def publish(self, topic: str, message: str) -> int:
        """
        Publish ``message`` on ``topic``.

        Returns:
            Number of subscribers that received the message

        Raises:
            ExternalServiceException: If Redis rejects the publish
        """
        try:
            receivers = await self.client.publish(topic, message)
        except RedisError as e:
            logger.error("Event publish failed", topic=topic, error=str(e))
            raise ExternalServiceException("redis", str(e)) from e

        logger.debug("Event published", topic=topic, receivers=receivers)
        return receivers

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
