"""Discovery package: collaborator Protocols and the grouping pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import InstanceHealth, InstanceRecord


@runtime_checkable
class LoadBalancerClient(Protocol):
    """Protocol for the load balancer membership and health lookups."""

    def instance_ids(self, load_balancer: str) -> list[str]:
        """Return the ids of the instances registered with the load balancer."""
        ...

    def instance_health(self, load_balancer: str, instance_ids: list[str]) -> list[InstanceHealth]:
        """Return the health state of each given instance."""
        ...


@runtime_checkable
class InventoryClient(Protocol):
    """Protocol for the compute inventory lookup."""

    def describe_instances(self, instance_ids: list[str]) -> list[InstanceRecord]:
        """Return instance records (state, address, tags) for the given ids."""
        ...
