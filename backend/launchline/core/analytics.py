"""
Product analytics backed by PostHog.

Capture is best effort: failures are logged and never reach the caller.
"""
from typing import Any, Dict, Optional

from posthog import Posthog

from launchline.core.config import get_settings
from launchline.core.logger import get_logger

logger = get_logger(__name__)

INVITATION_SENT_EVENT = "Workspace invitation sent"
MEMBER_JOINED_EVENT = "Workspace member joined"


class AnalyticsClient:
    """Thin wrapper around a PostHog client."""

    def __init__(self, client: Optional[Posthog] = None):
        self._client = client

    @classmethod
    def from_settings(cls) -> "AnalyticsClient":
        settings = get_settings()
        if not settings.posthog_api_key or settings.posthog_disabled:
            logger.info("Analytics disabled")
            return cls(None)

        return cls(
            Posthog(
                settings.posthog_api_key,
                host=settings.posthog_host,
                disabled=settings.posthog_disabled,
            )
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def capture(
        self,
        distinct_id: str,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self._client is None:
            return

        try:
            self._client.capture(distinct_id=distinct_id, event=event, properties=properties or {})
        except Exception as e:
            logger.warning("Analytics capture failed", event=event, error=str(e))

    def shutdown(self) -> None:
        """Flush queued events and stop the background consumer."""
        if self._client is None:
            return

        try:
            self._client.shutdown()
            logger.info("Analytics client flushed")
        except Exception as e:
            logger.warning("Analytics shutdown failed", error=str(e))


_analytics_client: Optional[AnalyticsClient] = None


def get_analytics_client() -> AnalyticsClient:
    """Dependency returning the process-wide analytics client."""
    global _analytics_client
    if _analytics_client is None:
        _analytics_client = AnalyticsClient.from_settings()
    return _analytics_client


def shutdown_analytics() -> None:
    global _analytics_client
    if _analytics_client is not None:
        _analytics_client.shutdown()
        _analytics_client = None
