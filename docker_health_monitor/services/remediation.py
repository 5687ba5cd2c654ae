"""Periodic restart of unhealthy containers."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from prometheus_client import Counter

from ..collectors.counter_family import LabelledCounterFamily
from ..utils.errors import RuntimeClientError
from ..utils.metrics import project_labels
from ..utils.status import ContainerHealth


UNHEALTHY_FILTER = {"health": [ContainerHealth.UNHEALTHY.value]}


@dataclass
class RemediationResult:
    """Outcome of one remediation tick."""

    restarted: int = 0
    failed: int = 0
    list_failed: bool = False


class RemediationLoop:
    """
    Restart containers Docker reports as unhealthy, on a fixed interval.

    Failures are never retried within a tick; a container that stays
    unhealthy is picked up again on the next one.
    """

    def __init__(
        self,
        client: Any,
        restart_interval: Optional[float],
        error_counter: Counter,
        restart_counter: LabelledCounterFamily,
        failed_restart_counter: LabelledCounterFamily,
        logger: logging.Logger
    ):
        """
        Initialize remediation loop.

        Args:
            client: Container runtime client
            restart_interval: Seconds between ticks, None disables the loop
            error_counter: Counter for failed list calls
            restart_counter: Successful restarts per container
            failed_restart_counter: Failed restarts per container
            logger: Logger instance
        """
        self.client = client
        self.restart_interval = restart_interval
        self.error_counter = error_counter
        self.restart_counter = restart_counter
        self.failed_restart_counter = failed_restart_counter
        self.logger = logger.getChild(self.__class__.__name__)

    @property
    def enabled(self) -> bool:
        return self.restart_interval is not None

    async def tick(self) -> RemediationResult:
        """
        List unhealthy containers and restart each of them once.

        Returns:
            RemediationResult: Restart counts for this tick
        """
        result = RemediationResult()

        try:
            containers = await self.client.list_containers(all=True, filters=UNHEALTHY_FILTER)
        except RuntimeClientError as e:
            self.error_counter.inc()
            self.logger.warning(f"Failed to restart: {e}")
            result.list_failed = True
            return result

        for container in containers:
            container_info = container.info()
            labels = project_labels(container, ContainerHealth.UNHEALTHY.value)
            self.logger.info(f"Restarting unhealthy container: {container_info}")

            if not container.id:
                self.failed_restart_counter.inc(labels)
                result.failed += 1
                self.logger.warning(
                    f"Failed to restart unhealthy container due to missing ID: {container_info}"
                )
                continue

            try:
                await self.client.restart(container.id)
            except RuntimeClientError as e:
                self.failed_restart_counter.inc(labels)
                result.failed += 1
                self.logger.warning(
                    f"Failed to restart unhealthy container {container_info}: {e}"
                )
                continue

            self.restart_counter.inc(labels)
            result.restarted += 1
            self.logger.info(f"Restarted unhealthy container: {container_info}")

        return result

    async def run(self) -> None:
        """
        Tick at a fixed rate until cancelled.

        The first tick runs immediately. Ticks missed because a previous one
        overran are skipped rather than run back to back.
        """
        if not self.enabled:
            self.logger.info("No restart interval configured, not restarting unhealthy containers")
            return

        self.logger.info(f"Restarting unhealthy containers every {self.restart_interval:g}s")
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while True:
            result = await self.tick()
            if result.restarted or result.failed:
                self.logger.info(
                    f"Remediation tick: {result.restarted} restarted, {result.failed} failed"
                )

            next_tick += self.restart_interval
            now = loop.time()
            if next_tick < now:
                missed = int((now - next_tick) // self.restart_interval) + 1
                next_tick += missed * self.restart_interval
            await asyncio.sleep(next_tick - now)
