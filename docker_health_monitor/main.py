"""Main application entry point for the Docker health monitor."""

import argparse
import asyncio
import logging
import signal
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, List, Optional

from prometheus_client import CollectorRegistry

from .config.loader import ConfigLoader
from .config.models import DockerHealthMonitorConfig, PrometheusConfig
from .config.settings import Settings
from .monitor import DockerHealthMonitor
from .services.docker_client import DockerRuntimeClient
from .services.metrics_server import MetricsServer
from .utils.logger import setup_logger


DEFAULT_PROMETHEUS_ADDRESS = "0.0.0.0:9092"


def _package_version() -> str:
    try:
        return version("docker-health-monitor")
    except PackageNotFoundError:
        return "unknown"


class DockerHealthMonitorApp:
    """
    Main monitor application.

    Serves the metrics endpoint, runs the remediation task and handles
    graceful shutdown.
    """

    def __init__(self, config: DockerHealthMonitorConfig):
        """
        Initialize monitor application.

        Args:
            config: Validated configuration
        """
        self.config = config
        self.logger = setup_logger("docker_health_monitor", config.log_level)
        self.registry = CollectorRegistry()
        self.client = None
        self.monitor = None
        self.server = None
        self._stop_event: Optional[asyncio.Event] = None

    def _build(self) -> None:
        """Create the runtime client, engine and metrics server."""
        self.client = DockerRuntimeClient.connect(self.config.docker, self.logger)
        self.monitor = DockerHealthMonitor(
            self.client,
            self.config.monitor.restart_interval,
            self.registry,
            logger=self.logger
        )
        self.server = MetricsServer(
            self.registry,
            self.config.prometheus.host,
            self.config.prometheus.port,
            self.logger
        )

    def _signal_handler(self, signum: int) -> None:
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        if self._stop_event is not None:
            self._stop_event.set()

    def request_stop(self) -> None:
        """Ask a running app to shut down."""
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self) -> int:
        """
        Serve metrics until stopped.

        Returns:
            int: Process exit code; 1 if the metrics address cannot be bound
            or the remediation task dies
        """
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._signal_handler, sig)
            except (NotImplementedError, RuntimeError):
                # Not on the main thread or not supported by the platform
                pass

        try:
            self._build()
        except Exception as e:
            self.logger.error(f"Application startup failed: {e}", exc_info=True)
            return 1

        try:
            self.server.start()
        except OSError as e:
            self.logger.error(
                f"Failed to bind metrics server to "
                f"{self.config.prometheus.host}:{self.config.prometheus.port}: {e}"
            )
            await self._shutdown()
            return 1

        remediation = self.monitor.start()
        stop = asyncio.ensure_future(self._stop_event.wait())
        exit_code = 0

        try:
            done, _ = await asyncio.wait(
                {remediation, stop},
                return_when=asyncio.FIRST_COMPLETED
            )
            if remediation in done:
                error = None if remediation.cancelled() else remediation.exception()
                if error is not None or remediation.cancelled():
                    self.logger.error(
                        "Remediation task terminated unexpectedly",
                        exc_info=error,
                        extra={"error_type": type(error).__name__ if error else "CancelledError"}
                    )
                    exit_code = 1
                else:
                    # Remediation disabled, keep serving metrics
                    await stop
        finally:
            stop.cancel()
            await self._shutdown()

        return exit_code

    async def _shutdown(self) -> None:
        if self.server is not None:
            self.server.stop()
        if self.monitor is not None:
            await self.monitor.close()
        if self.client is not None:
            self.client.close()
        self.logger.info("Docker health monitor stopped")


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Turn parsed arguments into nested configuration overrides.

    Args:
        args: Parsed command line

    Returns:
        dict: Overrides for ConfigLoader.load
    """
    prometheus = None
    if args.prometheus:
        prometheus = PrometheusConfig.from_address(args.prometheus).model_dump()

    return {
        "prometheus": prometheus,
        "monitor": {"restart_interval_ms": args.restart_interval},
        "docker": {
            "unix_socket": args.unix_socket,
            "http_url": args.http_url,
        },
        "log_level": args.log_level,
    }


def build_parser() -> argparse.ArgumentParser:
    """Command line parser; every option falls back to an environment variable."""
    parser = argparse.ArgumentParser(
        prog='docker-health-monitor',
        description="Prometheus exporter of docker container's health checks "
                    "with the option to restart unhealthy containers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export health metrics on the default address
  docker-health-monitor

  # Also restart unhealthy containers every 30 seconds
  docker-health-monitor --restart-interval 30000

  # Use a custom Docker socket and listen address
  docker-health-monitor --unix-socket /run/user/1000/docker.sock --prometheus 127.0.0.1:9092
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {_package_version()}'
    )

    parser.add_argument(
        '--prometheus',
        metavar='ADDRESS',
        default=Settings.get(Settings.PROMETHEUS_ADDRESS),
        help=f'Metrics listen address (default: {DEFAULT_PROMETHEUS_ADDRESS}, '
             f'env: {Settings.PROMETHEUS_ADDRESS})'
    )

    parser.add_argument(
        '--restart-interval',
        metavar='MILLISECONDS',
        type=int,
        default=Settings.get(Settings.RESTART_INTERVAL),
        help=f'Restart unhealthy containers at this interval; disabled if unset '
             f'(env: {Settings.RESTART_INTERVAL})'
    )

    parser.add_argument(
        '--config',
        metavar='PATH',
        default=None,
        help='Optional YAML configuration file; command line values take precedence'
    )

    parser.add_argument(
        '--log-level',
        default=Settings.get(Settings.LOG_LEVEL),
        type=str.upper,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help=f'Logging level (default: INFO, env: {Settings.LOG_LEVEL})'
    )

    connection = parser.add_argument_group('Docker connection')
    exclusive = connection.add_mutually_exclusive_group()
    exclusive.add_argument(
        '--unix-socket',
        metavar='PATH',
        default=Settings.get(Settings.DOCKER_UNIX_SOCKET),
        help=f'Docker unix socket (env: {Settings.DOCKER_UNIX_SOCKET})'
    )
    exclusive.add_argument(
        '--http',
        dest='http_url',
        metavar='URL',
        default=Settings.get(Settings.DOCKER_HTTP_URL),
        help=f'Docker HTTP endpoint (env: {Settings.DOCKER_HTTP_URL})'
    )

    return parser


def load_config(argv: Optional[List[str]] = None) -> DockerHealthMonitorConfig:
    """
    Parse the command line and build the validated configuration.

    Args:
        argv: Arguments without program name, sys.argv[1:] if None

    Returns:
        DockerHealthMonitorConfig: Configuration

    Raises:
        SystemExit: On invalid arguments or configuration
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return ConfigLoader.load(args.config, _cli_overrides(args))
    except FileNotFoundError as e:
        parser.error(str(e))
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        parser.error(f"Invalid configuration: {e}")


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point.

    Parses command-line arguments and runs the monitor until interrupted.
    """
    config = load_config(argv)
    app = DockerHealthMonitorApp(config)

    try:
        exit_code = asyncio.run(app.run())
    except KeyboardInterrupt:
        exit_code = 0
    except Exception as e:
        logging.error(f"Application failed: {e}", exc_info=True)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
