"""Shared pytest configuration and fixtures."""

import pytest
from typing import Dict, List, Optional

from prometheus_client import CollectorRegistry

from docker_health_monitor.utils.bridge import AsyncBridge
from docker_health_monitor.utils.errors import ConnectionFailure, OperationFailure
from docker_health_monitor.utils.logger import setup_logger
from docker_health_monitor.utils.metrics import ContainerRecord


class FakeRuntimeClient:
    """
    In-memory container runtime.

    containers: summaries as returned by /containers/json
    health: container ID -> State.Health block (missing key = no block)
    """

    def __init__(self, containers: List[dict], health: Optional[Dict[str, dict]] = None):
        self.containers = containers
        self.health = health or {}
        self.list_error: Optional[Exception] = None
        self.inspect_errors: Dict[str, Exception] = {}
        self.restart_errors: Dict[str, Exception] = {}
        self.list_calls: List[Optional[dict]] = []
        self.inspect_calls: List[str] = []
        self.restart_calls: List[str] = []

    async def list_containers(self, all: bool = True, filters: Optional[dict] = None) -> List[ContainerRecord]:
        self.list_calls.append(filters)
        if self.list_error is not None:
            raise self.list_error

        summaries = self.containers
        if filters and "health" in filters:
            wanted = filters["health"]
            summaries = [
                s for s in summaries
                if (self.health.get(s.get("Id")) or {}).get("Status") in wanted
            ]
        return [ContainerRecord.from_summary(s) for s in summaries]

    async def inspect_health(self, container_id: str) -> Optional[dict]:
        self.inspect_calls.append(container_id)
        if container_id in self.inspect_errors:
            raise self.inspect_errors[container_id]
        return self.health.get(container_id)

    async def restart(self, container_id: str) -> None:
        self.restart_calls.append(container_id)
        if container_id in self.restart_errors:
            raise self.restart_errors[container_id]

    def close(self) -> None:
        self.closed = True


def summary(container_id, name=None, image="nginx:latest"):
    """Build a /containers/json entry."""
    return {
        "Id": container_id,
        "Names": [name] if name else [],
        "Image": image,
        "Labels": {"com.docker.compose.project": "demo"},
        "State": "running",
    }


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def registry():
    """Fresh Prometheus registry per test."""
    return CollectorRegistry()


@pytest.fixture
def bridge():
    """Sync/async bridge, stopped after the test."""
    bridge = AsyncBridge(name="test-bridge")
    yield bridge
    bridge.close()


@pytest.fixture
def fake_client():
    """Runtime with one container of every health kind."""
    return FakeRuntimeClient(
        containers=[
            summary("aaa111", "/web-1"),
            summary("bbb222", "/api", image="python:3.12"),
            summary("ccc333", "/worker", image="alpine:3"),
            summary("ddd444", "/db", image="postgres:16"),
            summary("eee555", None, image="busybox"),
        ],
        health={
            "aaa111": {"Status": "healthy", "FailingStreak": 0},
            "bbb222": {"Status": "unhealthy", "FailingStreak": 3},
            "ccc333": {"Status": "starting"},
            "ddd444": {"Status": "none"},
            # eee555 has no health block
        },
    )


@pytest.fixture
def connection_failure():
    return ConnectionFailure("Cannot connect to the Docker daemon at unix:///var/run/docker.sock")


@pytest.fixture
def operation_failure():
    return OperationFailure("500 Server Error: Internal Server Error (\"cannot restart container\")")


@pytest.fixture
def make_client():
    """Factory for custom fake runtimes."""
    return FakeRuntimeClient


@pytest.fixture
def make_summary():
    """Factory for container list entries."""
    return summary
