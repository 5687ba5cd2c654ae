"""Base class for Prometheus collectors backed by async runtime calls."""

from abc import ABC, abstractmethod
from typing import List, Any
import logging
from functools import wraps

from prometheus_client import Counter
from prometheus_client.metrics_core import Metric

from ..utils.bridge import AsyncBridge


def safe_collect(func):
    """
    Decorator turning collection failures into an empty scrape result.

    The failure is logged with traceback and counted on the collector's
    error counter, so a failed collection never escapes into the HTTP
    handler and the families of other collectors are still exposed.

    Args:
        func: Collector method to wrap

    Returns:
        Wrapped function that catches exceptions
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except Exception as e:
            self.error_counter.inc()
            self.logger.error(f"HealthCheck failed: {e}", exc_info=True)
            return []
    return wrapper


class BaseCollector(ABC):
    """
    Abstract base class for scrape-time collectors.

    prometheus_client calls ``collect()`` synchronously on every scrape; the
    async work in ``collect_async()`` is driven to completion on the bridge.
    """

    def __init__(
        self,
        client: Any,
        error_counter: Counter,
        bridge: AsyncBridge,
        logger: logging.Logger
    ):
        """
        Initialize base collector.

        Args:
            client: Container runtime client
            error_counter: Counter incremented on every failed collection
            bridge: Sync/async bridge used from the scrape thread
            logger: Logger instance
        """
        self.client = client
        self.error_counter = error_counter
        self.bridge = bridge
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    async def collect_async(self) -> List[Metric]:
        """
        Build the metric families for one scrape.

        Returns:
            List[Metric]: Complete metric families

        Raises:
            Exception: Any collection errors (will be caught by safe_collect)
        """
        pass

    @abstractmethod
    def describe(self) -> List[Metric]:
        """Empty families naming what collect() produces, without runtime calls."""
        pass

    @safe_collect
    def collect(self) -> List[Metric]:
        """Synchronous entry point used by the collector registry."""
        return self.bridge.run(self.collect_async())
