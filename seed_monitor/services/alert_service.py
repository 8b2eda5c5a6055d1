import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock
from typing import Callable, Iterable, List, Set

import requests

from seed_monitor.metrics.report_metrics import AlertRequest
from seed_monitor.models.schemas import NodeAddress
from seed_monitor.utils.config_store import ConfigStore

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    pass


class SlackNotifier:
    """Posts messages to a Slack incoming webhook."""

    def __init__(self, webhook_url: str, timeout: int = 5):
        self._webhook_url = webhook_url
        self._timeout = timeout

    def notify(self, destination: str, title: str, body: str):
        text = f"*{title}*\n<{destination}> {body}"
        try:
            response = requests.post(self._webhook_url, json={"text": text}, timeout=self._timeout)
        except requests.RequestException as e:
            raise NotificationError(f"Slack request failed: {e}") from e
        if not response.ok:
            raise NotificationError(f"Slack responded {response.status_code} - {response.text}")


class AlertDispatcher:
    """Sends one notification per breaching (node, data key) pair.

    Notifications run on a thread pool. A failing notification is logged and
    counted, it never reaches the caller or other notifications.
    """

    def __init__(self, notifier=None, config: ConfigStore = None):
        self._config = config or ConfigStore()
        self._notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=self._config.notify_workers,
                                            thread_name_prefix="alert")
        self._pending: Set[Future] = set()
        self._lock = Lock()
        self.sent = 0
        self.failed = 0

    def compose(self, address: NodeAddress, key: str):
        title = f"Warning: {address.full_address}"
        body = (f"Your seed node delivers diverging results for {key}. "
                f"Please check the monitoring status page at {self._config.status_page_url}")
        return title, body

    def dispatch(self, destination: str, address: NodeAddress, key: str, percent: float) -> Future:
        title, body = self.compose(address, key)
        logger.warning(f"Deviation alert for {address.full_address}: {key} at {percent}%")
        future = self._executor.submit(self._send, destination, title, body)
        with self._lock:
            self._pending.add(future)
        # runs inline when the future is already done, so the lock must be free here
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future):
        with self._lock:
            self._pending.discard(future)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def dispatch_all(self, alerts: Iterable[AlertRequest],
                     recipient_lookup: Callable[[NodeAddress], str]) -> List[Future]:
        return [self.dispatch(recipient_lookup(alert.address), alert.address, alert.key, alert.percent)
                for alert in alerts]

    def _send(self, destination: str, title: str, body: str) -> bool:
        if self._notifier is None:
            logger.info(f"No notifier configured, dropping alert: {title}")
            return False
        try:
            self._notifier.notify(destination, title, body)
        except Exception as e:
            with self._lock:
                self.failed += 1
            logger.warning(f"Notification failed for {title}: {e}")
            return False
        with self._lock:
            self.sent += 1
        return True

    def wait(self, timeout=None):
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def shutdown(self):
        self._executor.shutdown(wait=True)
