import json
from pathlib import Path
from typing import Dict, Iterable

from seed_monitor.models.schemas import NodeAddress, SeedNodeInfo

UNKNOWN_OPERATOR = "Unknown operator"
DEFAULT_SLACK_USER = "here"


class SeedNodesRepository:
    def __init__(self, entries: Iterable[SeedNodeInfo] = ()):
        self._nodes: Dict[NodeAddress, SeedNodeInfo] = {
            NodeAddress.parse(entry.address): entry for entry in entries
        }

    @classmethod
    def from_file(cls, path) -> "SeedNodesRepository":
        with open(Path(path), encoding="utf-8") as file:
            raw = json.load(file)
        return cls(SeedNodeInfo(**item) for item in raw)

    def get_operator(self, address: NodeAddress) -> str:
        entry = self._nodes.get(address)
        return entry.operator if entry else UNKNOWN_OPERATOR

    def get_slack_user(self, address: NodeAddress) -> str:
        entry = self._nodes.get(address)
        return entry.slack_user if entry and entry.slack_user else DEFAULT_SLACK_USER

    def addresses(self):
        return list(self._nodes.keys())
