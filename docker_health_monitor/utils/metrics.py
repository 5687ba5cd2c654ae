"""Container records and metric label sets."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Union

from .status import ContainerHealth


@dataclass(frozen=True)
class ContainerRecord:
    """One entry of the Docker container list."""

    id: Optional[str]
    names: List[str] = field(default_factory=list)
    image: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    health: Optional[ContainerHealth] = None

    @classmethod
    def from_summary(cls, summary: Mapping[str, Any]) -> "ContainerRecord":
        """
        Build a record from a ``/containers/json`` entry.

        Args:
            summary: Raw container summary as returned by the Docker API

        Returns:
            ContainerRecord: Parsed record without a resolved health
        """
        return cls(
            id=summary.get("Id"),
            names=list(summary.get("Names") or []),
            image=summary.get("Image"),
            labels=dict(summary.get("Labels") or {}),
        )

    def with_health(self, health: ContainerHealth) -> "ContainerRecord":
        """Return a copy carrying the resolved health classification."""
        return replace(self, health=health)

    @property
    def display_name(self) -> Optional[str]:
        """First container name with one leading '/' removed."""
        if not self.names:
            return None
        name = self.names[0]
        if name.startswith("/"):
            return name[1:]
        return name

    def info(self) -> str:
        """Human-readable identity used in log lines."""
        return f"{', '.join(self.names)} ({self.id or 'n/a'})"


@dataclass(frozen=True)
class LabelSet:
    """
    Label key of one metric time series.

    None means the dimension is absent and is never equal to an empty string.
    """

    id: Optional[str] = None
    image: Optional[str] = None
    name: Optional[str] = None
    health: Optional[str] = None

    def as_labels(self) -> Dict[str, str]:
        """Prometheus label dict with absent dimensions omitted."""
        labels = {
            "id": self.id,
            "image": self.image,
            "name": self.name,
            "health": self.health,
        }
        return {key: value for key, value in labels.items() if value is not None}


def project_labels(
    record: ContainerRecord,
    health: Union[ContainerHealth, str, None] = None
) -> LabelSet:
    """
    Derive the metric label set of a container.

    Runtime labels of the container are not projected, keeping the series
    cardinality bounded by the container count.

    Args:
        record: Container to describe
        health: Classification or literal health label value

    Returns:
        LabelSet: Identity dimensions plus the given health dimension
    """
    if isinstance(health, ContainerHealth):
        health = health.label

    return LabelSet(
        id=record.id,
        image=record.image,
        name=record.display_name,
        health=health,
    )
