"""
Unit tests for the analytics client.
"""
from unittest.mock import MagicMock, patch

from launchline.core.analytics import AnalyticsClient


class TestAnalyticsClient:

    def test_disabled_client_is_a_no_op(self):
        client = AnalyticsClient(None)

        client.capture("user-1", "Workspace member joined", {"workspaceId": "ws-1"})
        client.shutdown()

        assert client.enabled is False

    def test_capture_forwards_to_posthog(self):
        posthog = MagicMock()
        client = AnalyticsClient(posthog)

        client.capture("user-1", "Workspace invitation sent", {"workspaceId": "ws-1"})

        posthog.capture.assert_called_once_with(
            distinct_id="user-1",
            event="Workspace invitation sent",
            properties={"workspaceId": "ws-1"},
        )

    def test_capture_failures_are_swallowed(self):
        posthog = MagicMock()
        posthog.capture.side_effect = RuntimeError("network down")
        client = AnalyticsClient(posthog)

        with patch("launchline.core.analytics.logger") as mock_logger:
            client.capture("user-1", "Workspace invitation sent")

        mock_logger.warning.assert_called_once()

    def test_shutdown_flushes(self):
        posthog = MagicMock()

        AnalyticsClient(posthog).shutdown()

        posthog.shutdown.assert_called_once()

    def test_from_settings_without_key_is_disabled(self):
        settings = MagicMock(posthog_api_key=None, posthog_disabled=False)

        with patch("launchline.core.analytics.get_settings", return_value=settings):
            client = AnalyticsClient.from_settings()

        assert client.enabled is False

    def test_from_settings_with_key_builds_posthog(self):
        settings = MagicMock(posthog_api_key="phc_test", posthog_host="https://eu.i.posthog.com", posthog_disabled=False)

        with patch("launchline.core.analytics.get_settings", return_value=settings), \
                patch("launchline.core.analytics.Posthog") as posthog_cls:
            client = AnalyticsClient.from_settings()

        posthog_cls.assert_called_once_with("phc_test", host="https://eu.i.posthog.com", disabled=False)
        assert client.enabled is True
