"""Docker health monitor engine: metrics wiring and remediation task."""

import asyncio
import logging
from typing import Any, Optional

from prometheus_client import CollectorRegistry, Counter

from .collectors.counter_family import LabelledCounterFamily
from .collectors.health_collector import HealthCollector
from .services.remediation import RemediationLoop
from .utils.bridge import AsyncBridge
from .utils.logger import setup_logger


class DockerHealthMonitor:
    """
    Owns the runtime client handle, the counters and the remediation task.

    Registers on an explicit registry:

    - ``errors_total``: Docker client errors
    - ``restarts_total`` / ``restart_failures_total``: restarts per container
    - ``health``: per-container health check gauge, computed per scrape
    """

    def __init__(
        self,
        client: Any,
        restart_interval: Optional[float],
        registry: CollectorRegistry,
        bridge: Optional[AsyncBridge] = None,
        logger: logging.Logger = None
    ):
        """
        Initialize the engine and register its metrics.

        Args:
            client: Container runtime client, shared by scrape and remediation
            restart_interval: Seconds between remediation ticks, None disables
            registry: Registry the metrics are registered on
            bridge: Sync/async bridge for scrapes; created and owned if None
            logger: Optional logger instance
        """
        self.client = client
        self.restart_interval = restart_interval
        self.registry = registry
        self.logger = logger or setup_logger("monitor")

        self._owns_bridge = bridge is None
        self.bridge = bridge or AsyncBridge(name="health-collector", logger=self.logger)

        self.error_counter = Counter(
            "errors",
            "Docker client errors",
            registry=registry
        )
        self.restart_counter = LabelledCounterFamily(
            "restarts",
            "Number of successful restarts triggered due to a container being unhealthy"
        )
        self.failed_restart_counter = LabelledCounterFamily(
            "restart_failures",
            "Number of failed restarts triggered due to a container being unhealthy"
        )
        registry.register(self.restart_counter)
        registry.register(self.failed_restart_counter)

        self.collector = HealthCollector(
            client,
            self.error_counter,
            self.bridge,
            self.logger
        )
        registry.register(self.collector)

        self.remediation = RemediationLoop(
            client,
            restart_interval,
            self.error_counter,
            self.restart_counter,
            self.failed_restart_counter,
            self.logger
        )
        self._task: Optional[asyncio.Task] = None

    async def run(self) -> None:
        """Run the remediation loop; returns at once when it is disabled."""
        await self.remediation.run()

    def start(self) -> asyncio.Task:
        """
        Spawn the remediation loop as a background task.

        Must be called from a running event loop.

        Returns:
            asyncio.Task: The remediation task
        """
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="remediation-loop")
        return self._task

    async def close(self) -> None:
        """Cancel the remediation task and stop an owned bridge."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        if self._owns_bridge:
            self.bridge.close()
