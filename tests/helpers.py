from seed_monitor.metrics.node_metrics import Metrics
from seed_monitor.models.schemas import NodeAddress


def address(port: int, host: str = "seed.onion") -> NodeAddress:
    return NodeAddress(host=host, port=port)


def make_metrics(durations=(), errors=None, data=()) -> Metrics:
    durations = list(durations)
    errors = list(errors) if errors is not None else [""] * len(durations)
    return Metrics(
        request_durations=durations,
        error_messages=errors,
        received_objects_list=[dict(d) for d in data],
    )
