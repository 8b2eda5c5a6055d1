from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Mapping, Optional, Tuple

from seed_monitor.models.schemas import NodeAddress


@dataclass(frozen=True)
class MetricsSnapshot:
    """Consistent read-only copy of one node's probe history."""
    request_durations: Tuple[int, ...] = ()
    error_messages: Tuple[str, ...] = ()
    received_objects_list: Tuple[Dict[str, int], ...] = ()

    @property
    def num_errors(self) -> int:
        return sum(1 for msg in self.error_messages if msg)

    @property
    def last_received_data(self) -> Dict[str, int]:
        return dict(self.received_objects_list[-1]) if self.received_objects_list else {}


@dataclass
class Metrics:
    request_durations: List[int] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)
    received_objects_list: List[Dict[str, int]] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False, compare=False)

    def add_result(self, duration_ms: int, error_message: str = "",
                   received_objects: Optional[Mapping[str, int]] = None):
        with self._lock:
            self.request_durations.append(duration_ms)
            self.error_messages.append(error_message)
            if received_objects is not None:
                self.received_objects_list.append(dict(received_objects))

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            # durations and errors are index aligned, drop any unpaired tail
            n = min(len(self.request_durations), len(self.error_messages))
            return MetricsSnapshot(
                request_durations=tuple(self.request_durations[:n]),
                error_messages=tuple(self.error_messages[:n]),
                received_objects_list=tuple(dict(d) for d in self.received_objects_list),
            )


class MetricsStore:
    def __init__(self):
        self._data: Dict[NodeAddress, Metrics] = {}
        self._data_lock = Lock()

    def put(self, address: NodeAddress, metrics: Metrics):
        with self._data_lock:
            self._data[address] = metrics

    def get(self, address: NodeAddress) -> Optional[Metrics]:
        with self._data_lock:
            return self._data.get(address)

    def items(self) -> List[Tuple[NodeAddress, MetricsSnapshot]]:
        with self._data_lock:
            entries = list(self._data.items())
        return [(address, metrics.snapshot()) for address, metrics in entries]

    def __len__(self):
        with self._data_lock:
            return len(self._data)

    def __contains__(self, address):
        with self._data_lock:
            return address in self._data
