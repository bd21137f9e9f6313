"""Reduce load balancer health reports to the in-service instance ids."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import InstanceHealth

logger = logging.getLogger(__name__)


def filter_healthy(states: Iterable[InstanceHealth]) -> list[str]:
    """Return the ids of instances whose state is exactly ``InService``, in input order."""
    healthy: list[str] = []
    for state in states:
        if state.in_service:
            healthy.append(state.instance_id)
        else:
            logger.debug("Instance %s is %s, skipping", state.instance_id, state.state)
    return healthy
