import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping

from seed_monitor.metrics.aggregator import Baseline
from seed_monitor.utils.config_store import ConfigStore

logger = logging.getLogger(__name__)


class Severity(Enum):
    NOMINAL = "black"
    ELEVATED = "blue"
    CRITICAL = "red"

    @property
    def color(self) -> str:
        return self.value


@dataclass(frozen=True)
class Deviation:
    key: str
    percent: float
    severity: Severity
    should_dispatch: bool

    @property
    def deviation_abs(self) -> float:
        return abs(self.percent - 100)

    def __str__(self):
        return f"{self.key}: {self.percent}%"


def severity_for(deviation_abs: float, config: ConfigStore) -> Severity:
    if deviation_abs < config.nominal_deviation:
        return Severity.NOMINAL
    if deviation_abs < config.elevated_deviation:
        return Severity.ELEVATED
    return Severity.CRITICAL


def classify(latest_sample: Mapping[str, int], baseline: Baseline,
             config: ConfigStore = None) -> Dict[str, Deviation]:
    """Compare a node's latest sample with the fleet baseline.

    Keys without a usable baseline average are left out of the result.
    """
    config = config or ConfigStore()
    result = {}
    for key, value in latest_sample.items():
        average = baseline.average(key)
        if not average:
            logger.debug(f"No baseline for {key}, skipping deviation")
            continue
        percent = round(value / average * 100, 2)
        deviation_abs = abs(percent - 100)
        result[key] = Deviation(
            key=key,
            percent=percent,
            severity=severity_for(deviation_abs, config),
            should_dispatch=deviation_abs >= config.alert_deviation,
        )
    return result
