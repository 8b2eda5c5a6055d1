"""Tests for alert dispatching and the Slack notifier."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from seed_monitor.metrics.report_metrics import AlertRequest
from seed_monitor.services.alert_service import AlertDispatcher, NotificationError, SlackNotifier
from seed_monitor.utils.config_store import ConfigStore

from helpers import address


class TestAlertDispatcher:
    def test_dispatch_sends_one_notification(self, dispatcher, notifier):
        future = dispatcher.dispatch("@alice", address(8000), "offers", 180.0)
        assert future.result(timeout=5) is True
        notifier.notify.assert_called_once()
        destination, title, body = notifier.notify.call_args.args
        assert destination == "@alice"
        assert title == "Warning: seed.onion:8000"
        assert "diverging results for offers" in body
        assert dispatcher.sent == 1

    def test_body_links_status_page(self, notifier):
        dispatcher = AlertDispatcher(notifier, ConfigStore(status_page_url="http://status.example/"))
        title, body = dispatcher.compose(address(1), "trades")
        assert body.endswith("Please check the monitoring status page at http://status.example/")
        dispatcher.shutdown()

    def test_failure_is_isolated(self, dispatcher, notifier):
        notifier.notify.side_effect = [NotificationError("boom"), None, RuntimeError("down"), None]
        futures = [dispatcher.dispatch("@x", address(p), "offers", 150.0) for p in range(4)]
        dispatcher.wait(timeout=5)
        assert sorted(f.result() for f in futures) == [False, False, True, True]
        assert dispatcher.failed == 2
        assert dispatcher.sent == 2

    def test_no_notifier_drops_alert(self):
        dispatcher = AlertDispatcher()
        assert dispatcher.dispatch("@x", address(1), "offers", 150.0).result(timeout=5) is False
        assert dispatcher.failed == 0
        dispatcher.shutdown()

    def test_dispatch_all_resolves_recipients(self, dispatcher, notifier):
        alerts = [
            AlertRequest(address=address(8000), key="offers", percent=180.0),
            AlertRequest(address=address(8001), key="trades", percent=40.0),
        ]
        futures = dispatcher.dispatch_all(alerts, lambda a: f"@user{a.port}")
        dispatcher.wait(timeout=5)
        assert len(futures) == 2
        destinations = sorted(call.args[0] for call in notifier.notify.call_args_list)
        assert destinations == ["@user8000", "@user8001"]

    def test_no_deduplication(self, dispatcher, notifier):
        for _ in range(3):
            dispatcher.dispatch("@x", address(1), "offers", 150.0)
        dispatcher.wait(timeout=5)
        assert notifier.notify.call_count == 3


class TestSlackNotifier:
    @patch("seed_monitor.services.alert_service.requests.post")
    def test_posts_webhook_payload(self, mock_post):
        mock_post.return_value = MagicMock(ok=True, status_code=200)
        SlackNotifier("https://hooks.slack.test/abc", timeout=3).notify("@alice", "Warning: n", "body")
        mock_post.assert_called_once_with(
            "https://hooks.slack.test/abc",
            json={"text": "*Warning: n*\n<@alice> body"},
            timeout=3,
        )

    @patch("seed_monitor.services.alert_service.requests.post")
    def test_error_status_raises(self, mock_post):
        mock_post.return_value = MagicMock(ok=False, status_code=500, text="oops")
        with pytest.raises(NotificationError, match="500"):
            SlackNotifier("https://hooks.slack.test/abc").notify("@a", "t", "b")

    @patch("seed_monitor.services.alert_service.requests.post")
    def test_transport_error_wrapped(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("unreachable")
        with pytest.raises(NotificationError, match="unreachable"):
            SlackNotifier("https://hooks.slack.test/abc").notify("@a", "t", "b")


def test_completed_notifications_are_released(notifier):
    dispatcher = AlertDispatcher(notifier)
    futures = [dispatcher.dispatch("@x", address(p), "offers", 150.0) for p in range(20)]
    # shutdown joins the workers, so every done callback has run
    dispatcher.shutdown()
    assert all(f.done() for f in futures)
    assert dispatcher.pending == 0
