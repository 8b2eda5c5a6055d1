import logging
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from seed_monitor.metrics.aggregator import compute_baseline
from seed_monitor.metrics.deviation import Deviation, Severity, classify
from seed_monitor.metrics.node_metrics import MetricsSnapshot, MetricsStore
from seed_monitor.models.schemas import NodeAddress
from seed_monitor.utils.config_store import ConfigStore

logger = logging.getLogger(__name__)

HTML_COLUMNS = [
    "Operator",
    "Node address",
    "Num requests",
    "Num errors",
    "Last error message",
    "RRT average",
    "Last data",
    "Data deviation last request",
]


@dataclass(frozen=True)
class AlertRequest:
    address: NodeAddress
    key: str
    percent: float


@dataclass
class NodeReport:
    operator: str
    address: NodeAddress
    num_requests: int
    num_errors: int
    last_error_index: int
    last_error_message: str
    duration_average: float
    durations: Tuple[int, ...]
    last_received_data: Dict[str, int]
    all_received_data: Tuple[Dict[str, int], ...]
    deviations: List[Deviation]
    row_color: str
    duration_color: str


@dataclass
class Report:
    total_errors: int
    checked_at: str
    nodes: List[NodeReport] = field(default_factory=list)
    alerts: List[AlertRequest] = field(default_factory=list)
    text: str = ""
    html: str = ""


def last_error(error_messages) -> Tuple[int, str]:
    for index in range(len(error_messages) - 1, -1, -1):
        if error_messages[index]:
            return index, f"Error at request {index}: {error_messages[index]}"
    return -1, ""


def errors_considered_resolved(last_error_index: int, num_errors: int) -> bool:
    # Compares a position with a count, so a node without any error (-1 vs 0)
    # is not considered resolved. Kept as the row colouring rule.
    return last_error_index == num_errors


def format_timestamp(ts_millis: int, tz: str) -> str:
    moment = datetime.fromtimestamp(ts_millis / 1000, ZoneInfo(tz))
    return moment.strftime("%a %b %d %H:%M:%S %Z %Y")


def _format_data(data: Dict[str, int]) -> List[str]:
    return [f"{key}={value}" for key, value in data.items()]


class ReportBuilder:
    def __init__(self, config: ConfigStore = None):
        self._config = config or ConfigStore()

    def build_report(self, store: MetricsStore, operator_lookup: Callable[[NodeAddress], str],
                     checked_at_ts: Optional[int] = None) -> Report:
        entries = store.items()
        operators = {address: operator_lookup(address) for address, _ in entries}
        # sorted() is stable, equal operators keep store insertion order
        entries = sorted(entries, key=lambda entry: operators[entry[0]])

        if checked_at_ts is None:
            checked_at_ts = int(datetime.now().timestamp() * 1000)
        report = Report(
            total_errors=sum(snapshot.num_errors for _, snapshot in entries),
            checked_at=format_timestamp(checked_at_ts, self._config.timezone),
        )
        baseline = compute_baseline(entries)

        for address, snapshot in entries:
            node = self._node_report(operators[address], address, snapshot, baseline)
            report.nodes.append(node)
            report.alerts.extend(
                AlertRequest(address=address, key=deviation.key, percent=deviation.percent)
                for deviation in node.deviations if deviation.should_dispatch
            )

        report.text = self._render_text(report)
        report.html = self._render_html(report)
        logger.debug(f"Report built for {len(report.nodes)} nodes, {len(report.alerts)} alerts")
        return report

    def _node_report(self, operator, address, snapshot: MetricsSnapshot, baseline) -> NodeReport:
        durations = snapshot.request_durations
        duration_average = 0
        if durations:
            duration_average = sum(durations) / len(durations) / self._config.duration_divisor
        num_errors = snapshot.num_errors
        last_error_index, last_error_message = last_error(snapshot.error_messages)

        deviations = []
        if snapshot.received_objects_list:
            deviations = list(classify(snapshot.last_received_data, baseline, self._config).values())

        return NodeReport(
            operator=operator,
            address=address,
            num_requests=len(durations),
            num_errors=num_errors,
            last_error_index=last_error_index,
            last_error_message=last_error_message,
            duration_average=duration_average,
            durations=durations,
            last_received_data=snapshot.last_received_data,
            all_received_data=snapshot.received_objects_list,
            deviations=deviations,
            row_color=Severity.NOMINAL.color if errors_considered_resolved(last_error_index, num_errors)
            else Severity.CRITICAL.color,
            duration_color=Severity.NOMINAL.color if duration_average < self._config.max_duration_average
            else Severity.CRITICAL.color,
        )

    def _render_text(self, report: Report) -> str:
        lines = [
            f"Seed nodes in error: {report.total_errors}",
            f"Last check started at: {report.checked_at}",
        ]
        for node in report.nodes:
            lines += [
                "",
                f"Operator: {node.operator}",
                f"Node address: {node.address}",
                f"Num requests: {node.num_requests}",
                f"Num errors: {node.num_errors}",
                f"Last error message: {node.last_error_message}",
                f"RRT average: {node.duration_average}",
                f"Last data: {', '.join(_format_data(node.last_received_data))}",
            ]
            if node.all_received_data:
                lines.append("Data deviation last request:")
                lines += [str(deviation) for deviation in node.deviations]
            lines += [
                f"Duration of all requests: {', '.join(str(d) for d in node.durations)}",
                f"All data: {', '.join('{' + ', '.join(_format_data(d)) + '}' for d in node.all_received_data)}",
            ]
        return "\n".join(lines) + "\n"

    def _render_html(self, report: Report) -> str:
        def cell(value, color):
            return f'<td><font color="{color}">{escape(str(value))}</font></td>'

        html = [
            "<html><head><style>table, th, td {border: 1px solid black;}</style></head><body>",
            f"<h1>Seed nodes in error: <b>{report.total_errors}</b></h1>",
            f"Last check started at: {escape(report.checked_at)}<br/>",
            '<table style="width:100%"><tr>',
            "".join(f'<th align="left">{column}</th>' for column in HTML_COLUMNS),
            "</tr>",
        ]
        for node in report.nodes:
            html.append("<tr>")
            html += [cell(value, node.row_color) for value in (
                node.operator, node.address, node.num_requests, node.num_errors, node.last_error_message)]
            html.append(cell(node.duration_average, node.duration_color))
            html.append(f"<td>{'<br/>'.join(escape(item) for item in _format_data(node.last_received_data))}</td>")
            html.append("<td>" + "".join(
                f'<font color="{deviation.severity.color}">{escape(str(deviation))}</font><br/>'
                for deviation in node.deviations
            ) + "</td>")
            html.append("</tr>")
        html.append("</table></body></html>")
        return "".join(html)
