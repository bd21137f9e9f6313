"""Partition instances into Prometheus target groups by tag values."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .models import InstanceRecord, TargetGroup
from .tag_filter import TagSpec

logger = logging.getLogger(__name__)


def signature(instance: InstanceRecord, keys: Sequence[str]) -> str:
    """Grouping key for an instance, e.g. ``|Environment=prod|Name=web``."""
    return "".join(f"|{key}={instance.tag(key)}" for key in keys)


def all_tag_keys(instances: Iterable[InstanceRecord]) -> list[str]:
    """Every tag key present on any instance, sorted."""
    keys: set[str] = set()
    for instance in instances:
        keys.update(instance.tags)
    return sorted(keys)


def effective_keys(spec: TagSpec, instances: Iterable[InstanceRecord]) -> list[str]:
    """The keys to group by: the spec's keys, or all observed tag keys when the spec is empty."""
    keys = spec.keys()
    if keys:
        return keys
    keys = all_tag_keys(instances)
    logger.info("No grouping tags given, grouping by all tag keys: %s", ", ".join(keys) or "(none)")
    return keys


def group_by_tags(
    instances: Iterable[InstanceRecord],
    keys: Sequence[str],
    port: int,
) -> dict[str, TargetGroup]:
    """Group running instances by their values for ``keys``.

    Each group's labels hold the non-empty tag values of its first member;
    targets are ``<private ip>:<port>`` in the order instances are seen.
    Instances that are not running, or have no private address, are left out.
    """
    groups: dict[str, TargetGroup] = {}

    for instance in instances:
        if not instance.is_running:
            logger.debug(
                "Instance %s is %s, skipping",
                instance.instance_id, instance.state_name or instance.state_code,
            )
            continue
        if not instance.private_ip:
            logger.debug("Instance %s has no private IP, skipping", instance.instance_id)
            continue

        key = signature(instance, keys)
        group = groups.get(key)
        if group is None:
            labels = {}
            for tag_key in keys:
                value = instance.tag(tag_key)
                if value:
                    labels[tag_key] = value
            group = TargetGroup(labels=labels)
            groups[key] = group

        group.targets.append(f"{instance.private_ip}:{port}")

    return groups
