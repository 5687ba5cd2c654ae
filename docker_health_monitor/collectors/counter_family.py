"""Counters keyed by container label sets."""

import threading
from typing import Dict, List

from prometheus_client.core import CounterMetricFamily
from prometheus_client.metrics_core import Metric

from ..utils.metrics import LabelSet


class LabelledCounterFamily:
    """
    Monotonic counters, one per LabelSet.

    prometheus_client's labelled Counter requires a string for every label
    name; absent dimensions are omitted here instead of being rendered as
    empty strings.
    """

    def __init__(self, name: str, documentation: str):
        self.name = name
        self.documentation = documentation
        self._values: Dict[LabelSet, float] = {}
        self._lock = threading.Lock()

    def inc(self, labels: LabelSet, amount: float = 1) -> None:
        """
        Increment the counter of one label set.

        Args:
            labels: Series key
            amount: Non-negative increment

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError('Counters can only be incremented by non-negative amounts.')
        with self._lock:
            self._values[labels] = self._values.get(labels, 0.0) + amount

    def get(self, labels: LabelSet) -> float:
        """Current value of one series, 0 if never incremented."""
        with self._lock:
            return self._values.get(labels, 0.0)

    def describe(self) -> List[Metric]:
        return [CounterMetricFamily(self.name, self.documentation)]

    def collect(self) -> List[Metric]:
        family = CounterMetricFamily(self.name, self.documentation)
        with self._lock:
            values = list(self._values.items())
        for labels, value in values:
            family.add_sample(f"{self.name}_total", labels.as_labels(), value)
        return [family]
