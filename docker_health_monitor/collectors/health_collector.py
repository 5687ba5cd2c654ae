"""Per-container health check gauge, built on every scrape."""

from typing import List

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from ..utils.errors import MalformedRecordError
from ..utils.metrics import project_labels
from ..utils.status import ContainerHealth, classify
from .base import BaseCollector


HEALTH_METRIC = "health"
HEALTH_DOCUMENTATION = "The current state of the healthcheck"


class HealthCollector(BaseCollector):
    """
    Collector exposing the ``health`` gauge family.

    For every container one sample per possible classification is emitted,
    exactly one of them set to 1. A failure anywhere in the pass drops the
    whole family from the scrape.
    """

    def describe(self) -> List[Metric]:
        return [GaugeMetricFamily(HEALTH_METRIC, HEALTH_DOCUMENTATION)]

    async def collect_async(self) -> List[Metric]:
        return [await self.build_snapshot()]

    async def build_snapshot(self) -> GaugeMetricFamily:
        """
        Inspect every container and build the gauge family.

        Returns:
            GaugeMetricFamily: One sample per (container, classification)

        Raises:
            MalformedRecordError: If a container has no ID or no state
            RuntimeClientError: If listing or inspecting fails
        """
        family = GaugeMetricFamily(HEALTH_METRIC, HEALTH_DOCUMENTATION)

        containers = await self.client.list_containers(all=True)
        for container in containers:
            if not container.id:
                raise MalformedRecordError(
                    f"Failed to get ID from container {container.info()}"
                )

            health = classify(await self.client.inspect_health(container.id))
            container = container.with_health(health)

            for candidate in ContainerHealth.values():
                labels = project_labels(container, candidate)
                family.add_sample(
                    HEALTH_METRIC,
                    labels.as_labels(),
                    1.0 if candidate == container.health else 0.0
                )

        self.logger.debug(f"Collected health of {len(containers)} container(s)")
        return family
