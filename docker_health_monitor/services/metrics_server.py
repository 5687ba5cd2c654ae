"""HTTP endpoint serving the Prometheus text exposition."""

import logging
import threading
from typing import Optional

from prometheus_client import CollectorRegistry, start_http_server


class MetricsServer:
    """Threaded prometheus_client HTTP server bound to one registry."""

    def __init__(
        self,
        registry: CollectorRegistry,
        host: str,
        port: int,
        logger: logging.Logger
    ):
        """
        Initialize metrics server.

        Args:
            registry: Registry to expose
            host: Listen address
            port: Listen port
            logger: Logger instance
        """
        self.registry = registry
        self.host = host
        self.port = port
        self.logger = logger.getChild(self.__class__.__name__)
        self._server = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._server is not None

    def start(self) -> None:
        """
        Bind and start serving in a background thread.

        Raises:
            OSError: If the address cannot be bound
        """
        self._server, self._thread = start_http_server(
            self.port,
            addr=self.host,
            registry=self.registry
        )
        # Port 0 binds an ephemeral port
        self.port = self._server.server_address[1]
        self.logger.info(f"Serving metrics on http://{self.host}:{self.port}/metrics")

    def stop(self) -> None:
        """Shut down the server and wait for its thread."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None
        self.logger.info("Metrics server stopped")
