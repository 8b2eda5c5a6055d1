from unittest.mock import MagicMock

import pytest

from seed_monitor.metrics.node_metrics import MetricsStore
from seed_monitor.models.schemas import SeedNodeInfo
from seed_monitor.services.alert_service import AlertDispatcher
from seed_monitor.services.seed_nodes_repository import SeedNodesRepository


@pytest.fixture
def store() -> MetricsStore:
    return MetricsStore()


@pytest.fixture
def repository() -> SeedNodesRepository:
    return SeedNodesRepository([
        SeedNodeInfo(address="seed.onion:8000", operator="alice", slack_user="@alice"),
        SeedNodeInfo(address="seed.onion:8001", operator="bob", slack_user="@bob"),
        SeedNodeInfo(address="seed.onion:8002", operator="carol"),
        SeedNodeInfo(address="seed.onion:8003", operator="dave", slack_user="@dave"),
    ])


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def dispatcher(notifier):
    dispatcher = AlertDispatcher(notifier)
    yield dispatcher
    dispatcher.shutdown()
