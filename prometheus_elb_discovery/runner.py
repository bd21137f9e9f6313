"""One discovery run: load balancer -> health -> inventory -> group -> publish."""

from __future__ import annotations

import logging
import time

from .config import AppConfig
from .discovery import InventoryClient, LoadBalancerClient
from .discovery.aws_client import EC2Client, ELBClient
from .discovery.grouping import effective_keys, group_by_tags
from .discovery.health import filter_healthy
from .output.publisher import publish
from .output.serializer import serialize

logger = logging.getLogger(__name__)


class Runner:
    """Runs the discovery pipeline once and publishes the resulting document.

    Nothing is written unless every step before publication succeeds.
    """

    def __init__(
        self,
        config: AppConfig,
        lb_client: LoadBalancerClient | None = None,
        inventory_client: InventoryClient | None = None,
    ):
        self._config = config
        self._tag_spec = config.tag_spec
        self._lb = lb_client if lb_client is not None else ELBClient(config.aws)
        self._inventory = inventory_client if inventory_client is not None else EC2Client(config.aws)

    def run_once(self) -> int:
        """Execute a single run. Returns the number of target groups published."""
        start = time.monotonic()
        targets = self._config.targets
        elb_name = targets.load_balancer

        for selector in self._tag_spec.with_values():
            logger.info(
                "Tag selector %s groups by key %r only; instances with other values are not excluded",
                selector, selector.key,
            )

        members = self._lb.instance_ids(elb_name)
        states = self._lb.instance_health(elb_name, members)
        healthy = filter_healthy(states)
        logger.info(
            "%d of %d instances in service",
            len(healthy), len(members),
            extra={"load_balancer": elb_name, "members": len(members), "healthy": len(healthy)},
        )

        instances = self._inventory.describe_instances(healthy)
        keys = effective_keys(self._tag_spec, instances)
        groups = group_by_tags(instances, keys, targets.port)
        target_count = sum(len(g.targets) for g in groups.values())
        logger.info(
            "Grouped %d targets into %d target groups",
            target_count, len(groups),
            extra={"instances": len(instances), "groups": len(groups), "targets": target_count},
        )

        document = serialize(groups)
        publish(targets.dest, document)

        elapsed = time.monotonic() - start
        logger.info(
            "Run complete",
            extra={"dest": targets.dest, "elapsed_seconds": round(elapsed, 2)},
        )
        return len(groups)
