"""Data models for load balancer members and Prometheus target groups."""

from __future__ import annotations

from dataclasses import dataclass, field

# EC2 lifecycle codes (low byte of InstanceState.Code)
STATE_PENDING = 0
STATE_RUNNING = 16
STATE_SHUTTING_DOWN = 32
STATE_TERMINATED = 48
STATE_STOPPING = 64
STATE_STOPPED = 80

IN_SERVICE = "InService"


@dataclass(frozen=True)
class InstanceRecord:
    """Snapshot of one EC2 instance as returned by the inventory lookup."""

    instance_id: str
    state_code: int
    private_ip: str | None = None
    tags: dict[str, str] = field(default_factory=dict)
    state_name: str = ""

    @property
    def is_running(self) -> bool:
        return self.state_code == STATE_RUNNING

    def tag(self, key: str) -> str:
        """Value of the given tag, or an empty string when the instance lacks it."""
        return self.tags.get(key, "")


@dataclass(frozen=True)
class InstanceHealth:
    """Health of one instance as reported by the load balancer."""

    instance_id: str
    state: str
    reason_code: str = ""
    description: str = ""

    @property
    def in_service(self) -> bool:
        return self.state == IN_SERVICE


@dataclass
class TargetGroup:
    """A set of Prometheus targets sharing the same grouping tag values."""

    labels: dict[str, str] = field(default_factory=dict)
    targets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """The file_sd representation: targets first, labels with sorted keys."""
        return {
            "targets": list(self.targets),
            "labels": dict(sorted(self.labels.items())),
        }
