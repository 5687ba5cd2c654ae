"""Container health classification."""

from enum import Enum
from typing import Any, Mapping, Optional, Tuple


class ContainerHealth(Enum):
    """Health check outcome of a single container."""

    EMPTY = ""
    NONE = "none"
    STARTING = "starting"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "null"

    @classmethod
    def values(cls) -> Tuple["ContainerHealth", ...]:
        """
        All classifications in their fixed exposition order.

        Returns:
            Tuple[ContainerHealth, ...]: Every member, UNKNOWN last
        """
        return _ALL_HEALTH_VALUES

    @property
    def label(self) -> str:
        """Label value used for the ``health`` dimension."""
        return self.value


_ALL_HEALTH_VALUES = (
    ContainerHealth.EMPTY,
    ContainerHealth.NONE,
    ContainerHealth.STARTING,
    ContainerHealth.HEALTHY,
    ContainerHealth.UNHEALTHY,
    ContainerHealth.UNKNOWN,
)

# Status strings Docker reports in State.Health.Status
_RECOGNIZED_STATUSES = {
    "": ContainerHealth.EMPTY,
    "starting": ContainerHealth.STARTING,
    "healthy": ContainerHealth.HEALTHY,
    "unhealthy": ContainerHealth.UNHEALTHY,
}


def classify(health: Optional[Mapping[str, Any]]) -> ContainerHealth:
    """
    Classify the ``State.Health`` block of an inspect response.

    Args:
        health: Raw health block, or None if the container has none

    Returns:
        ContainerHealth: UNKNOWN for a missing block, NONE when no
        recognised status is reported, otherwise the matching member
    """
    if health is None:
        return ContainerHealth.UNKNOWN

    status = health.get("Status")
    if not isinstance(status, str):
        return ContainerHealth.NONE

    return _RECOGNIZED_STATUSES.get(status, ContainerHealth.NONE)
