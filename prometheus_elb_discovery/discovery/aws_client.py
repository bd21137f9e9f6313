"""AWS boto3 clients for Classic ELB membership/health and EC2 instance lookups."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import AWSConfig
from ..exceptions import LookupFailedError
from .models import InstanceHealth, InstanceRecord

logger = logging.getLogger(__name__)

# describe_instances accepts at most this many ids per filtered request
_MAX_IDS_PER_REQUEST = 100


def _client(aws_config: AWSConfig, service: str) -> Any:
    """Build a boto3 client for ``service``; session or profile failures become LookupFailedError."""
    session_kwargs: dict[str, Any] = {"region_name": aws_config.region}
    if aws_config.credential_profile:
        session_kwargs["profile_name"] = aws_config.credential_profile
    try:
        return boto3.Session(**session_kwargs).client(service)
    except (ClientError, BotoCoreError) as exc:
        raise LookupFailedError(
            f"Could not create {service} client in {aws_config.region}: {exc}",
            operation="CreateSession",
        ) from exc


class ELBClient:
    """Reads instance membership and health from a Classic Elastic Load Balancer."""

    def __init__(self, aws_config: AWSConfig):
        self._config = aws_config
        self._elb = _client(aws_config, "elb")

    def instance_ids(self, load_balancer: str) -> list[str]:
        """Return the ids of the instances registered with ``load_balancer``."""
        try:
            response = self._elb.describe_load_balancers(LoadBalancerNames=[load_balancer])
        except (ClientError, BotoCoreError) as exc:
            raise LookupFailedError(
                f"Could not describe load balancer {load_balancer!r}: {exc}",
                operation="DescribeLoadBalancers",
            ) from exc

        descriptions = response.get("LoadBalancerDescriptions", [])
        if not descriptions:
            raise LookupFailedError(
                f"Load balancer {load_balancer!r} not found",
                operation="DescribeLoadBalancers",
            )

        ids = [member["InstanceId"] for member in descriptions[0].get("Instances", [])]
        logger.info("Load balancer %s has %d registered instances", load_balancer, len(ids))
        return ids

    def instance_health(self, load_balancer: str, instance_ids: list[str]) -> list[InstanceHealth]:
        """Return the health state of each of ``instance_ids``.

        No request is made for an empty id list: the API would otherwise
        report on every registered instance.
        """
        if not instance_ids:
            return []

        try:
            response = self._elb.describe_instance_health(
                LoadBalancerName=load_balancer,
                Instances=[{"InstanceId": iid} for iid in instance_ids],
            )
        except (ClientError, BotoCoreError) as exc:
            raise LookupFailedError(
                f"Could not describe instance health for {load_balancer!r}: {exc}",
                operation="DescribeInstanceHealth",
            ) from exc

        return [
            InstanceHealth(
                instance_id=state["InstanceId"],
                state=state.get("State", ""),
                reason_code=state.get("ReasonCode", ""),
                description=state.get("Description", ""),
            )
            for state in response.get("InstanceStates", [])
        ]


class EC2Client:
    """Resolves instance ids to state, private address and tags."""

    def __init__(self, aws_config: AWSConfig):
        self._config = aws_config
        self._ec2 = _client(aws_config, "ec2")

    def describe_instances(self, instance_ids: list[str]) -> list[InstanceRecord]:
        """Return an InstanceRecord for each of ``instance_ids``.

        No request is made for an empty id list: the API would otherwise
        describe every instance in the account.
        """
        if not instance_ids:
            return []

        records: list[InstanceRecord] = []
        paginator = self._ec2.get_paginator("describe_instances")
        try:
            for chunk in _chunks(instance_ids, _MAX_IDS_PER_REQUEST):
                for page in paginator.paginate(InstanceIds=chunk):
                    for reservation in page.get("Reservations", []):
                        for raw in reservation.get("Instances", []):
                            records.append(_parse_instance(raw))
        except (ClientError, BotoCoreError) as exc:
            raise LookupFailedError(
                f"Could not describe EC2 instances: {exc}",
                operation="DescribeInstances",
            ) from exc

        logger.info("EC2 lookup returned %d of %d instances", len(records), len(instance_ids))
        return records


def _parse_instance(raw: dict[str, Any]) -> InstanceRecord:
    """Parse a raw EC2 instance dict into an InstanceRecord."""
    state = raw.get("State", {})
    return InstanceRecord(
        instance_id=raw["InstanceId"],
        # The high byte of the code is reserved for internal use
        state_code=int(state.get("Code", -1)) & 0xFF,
        state_name=state.get("Name", ""),
        private_ip=raw.get("PrivateIpAddress") or None,
        tags={t["Key"]: t["Value"] for t in raw.get("Tags", [])},
    )


def _chunks(lst: list, size: int):
    """Yield successive fixed-size chunks from lst."""
    for i in range(0, len(lst), size):
        yield lst[i : i + size]
