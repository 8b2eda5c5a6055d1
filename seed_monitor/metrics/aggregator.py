from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from seed_monitor.metrics.node_metrics import MetricsSnapshot
from seed_monitor.models.schemas import NodeAddress


@dataclass(frozen=True)
class Baseline:
    """Fleet-wide average per data key over each node's most recent sample.

    ``contributing_nodes`` is the number of nodes with at least one data
    sample. It is the divisor for every key, whether or not a node reported
    that key.
    """
    averages: Dict[str, float] = field(default_factory=dict)
    contributing_nodes: int = 0

    def average(self, key: str) -> Optional[float]:
        if self.contributing_nodes == 0:
            return None
        return self.averages.get(key)


def compute_baseline(entries: Iterable[Tuple[NodeAddress, MetricsSnapshot]]) -> Baseline:
    sums: Dict[str, float] = {}
    contributing_nodes = 0
    for _, snapshot in entries:
        if not snapshot.received_objects_list:
            continue
        contributing_nodes += 1
        for key, value in snapshot.received_objects_list[-1].items():
            sums[key] = sums.get(key, 0) + value

    if contributing_nodes == 0:
        return Baseline()
    return Baseline(
        averages={key: total / contributing_nodes for key, total in sums.items()},
        contributing_nodes=contributing_nodes,
    )
