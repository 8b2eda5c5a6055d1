import json
import logging

from seed_monitor.config import settings
from seed_monitor.metrics.node_metrics import Metrics
from seed_monitor.models.schemas import NodeAddress, NodeMetricsDump
from seed_monitor.services.alert_service import AlertDispatcher, SlackNotifier
from seed_monitor.services.monitor_service import MonitorService
from seed_monitor.services.seed_nodes_repository import SeedNodesRepository
from seed_monitor.utils.config_store import ConfigStore
from seed_monitor.utils.exception_decorator import log_exceptions
from seed_monitor.utils.logging_config import log_header, setup_logging


def require(value, key):
    if not value:
        raise ValueError(f"Env {key} is not set")
    return value


def load_metrics(path):
    with open(path, encoding="utf-8") as file:
        raw = json.load(file)
    for item in raw:
        dump = NodeMetricsDump(**item)
        yield NodeAddress.parse(dump.address), Metrics(
            request_durations=list(dump.request_durations),
            error_messages=list(dump.error_messages),
            received_objects_list=list(dump.received_objects_list),
        )


@log_exceptions
def run(last_check_ts=None):
    config = ConfigStore(timezone=settings.REPORT_TIMEZONE, status_page_url=settings.STATUS_PAGE_URL)
    metrics_file = require(settings.METRICS_FILE, "METRICS_FILE")

    repository = SeedNodesRepository()
    if settings.SEED_NODES_FILE:
        repository = SeedNodesRepository.from_file(settings.SEED_NODES_FILE)

    notifier = None
    if settings.SLACK_URL_SEED_CHANNEL:
        notifier = SlackNotifier(settings.SLACK_URL_SEED_CHANNEL, timeout=config.notify_timeout)
    dispatcher = AlertDispatcher(notifier, config)

    service = MonitorService(repository, dispatcher, config=config)
    for address, metrics in load_metrics(metrics_file):
        service.add_to_map(address, metrics)
    service.last_check_ts = last_check_ts

    log_header("Seed node report")
    report = service.update_report()
    settings.REPORT_DIR.mkdir(parents=True, exist_ok=True)
    (settings.REPORT_DIR / "report.txt").write_text(report.text, encoding="utf-8")
    (settings.REPORT_DIR / "report.html").write_text(report.html, encoding="utf-8")
    service.log()
    service.print_stats()

    dispatcher.wait()
    dispatcher.shutdown()
    logging.getLogger(__name__).info(f"Reports written to {settings.REPORT_DIR}")
    return report


def main():
    setup_logging("seed-monitor", settings.LOG_LEVEL)
    run()


if __name__ == "__main__":
    main()
