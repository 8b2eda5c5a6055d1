import logging
from typing import Optional

import tabulate

from seed_monitor.metrics.node_metrics import Metrics, MetricsStore
from seed_monitor.metrics.report_metrics import Report, ReportBuilder
from seed_monitor.models.schemas import NodeAddress
from seed_monitor.services.alert_service import AlertDispatcher
from seed_monitor.services.seed_nodes_repository import SeedNodesRepository
from seed_monitor.utils.config_store import ConfigStore
from seed_monitor.utils.exception_decorator import log_exceptions

logger = logging.getLogger(__name__)


class MonitorService:
    """Owns the metrics store and turns it into reports and alerts."""

    def __init__(self, repository: SeedNodesRepository, dispatcher: AlertDispatcher,
                 store: MetricsStore = None, config: ConfigStore = None):
        self.store = store if store is not None else MetricsStore()
        self._repository = repository
        self._dispatcher = dispatcher
        self._builder = ReportBuilder(config)
        self.last_check_ts: Optional[int] = None
        self.report: Optional[Report] = None

    def add_to_map(self, address: NodeAddress, metrics: Metrics):
        self.store.put(address, metrics)

    def get_metrics(self, address: NodeAddress) -> Optional[Metrics]:
        return self.store.get(address)

    @property
    def result_as_string(self) -> str:
        return self.report.text if self.report else ""

    @property
    def result_as_html(self) -> str:
        return self.report.html if self.report else ""

    @log_exceptions
    def update_report(self) -> Report:
        self.report = self._builder.build_report(self.store, self._repository.get_operator, self.last_check_ts)
        self._dispatcher.dispatch_all(self.report.alerts, self._repository.get_slack_user)
        logger.info(f"Report updated: {len(self.report.nodes)} nodes, "
                    f"{self.report.total_errors} errors, {len(self.report.alerts)} alerts")
        return self.report

    def log(self):
        banner = "#" * 65
        logger.info(f"\n\n{banner}\n{self.result_as_string}{banner}\n\n")

    def print_stats(self):
        if self.report is None:
            return
        rows = [[
            node.operator,
            node.address.full_address,
            node.num_requests,
            node.num_errors,
            f"{node.duration_average:.2f}",
            sum(1 for deviation in node.deviations if deviation.should_dispatch),
        ] for node in self.report.nodes]
        headers = ["Operator", "Node", "Requests", "Errors", "RRT avg (s)", "Alerts"]
        logger.info("\n" + tabulate.tabulate(rows, headers=headers, tablefmt="grid") + "\n")
