"""Decide what each partition implements and what crosses the boundary."""

import logging

from enclave_partitioner.models import (
    BoundaryCall,
    BoundaryDescriptor,
    PartitionPlan,
    Side,
)
from enclave_partitioner.registry import FunctionRegistry

logger = logging.getLogger(__name__)


def plan_partition(registry: FunctionRegistry, side: Side) -> PartitionPlan:
    """Split the registry into local and remote functions for one side.

    A side implements its own functions and every neutral function; the
    other side's functions are reached through proxies. Neutral functions
    are never proxied.

    Args:
        registry: Classified functions
        side: Partition being planned

    Returns:
        PartitionPlan for `side`
    """
    side = Side(side)
    own = registry.by_label(side.label)
    other = registry.by_label(side.opposite.label)

    plan = PartitionPlan(
        side=side,
        local=own + registry.neutral,
        remote=other,
        exported=own,
    )
    logger.info(
        f"{side.class_name} plan: {len(plan.local)} local, "
        f"{len(plan.remote)} remote, {len(plan.exported)} exported"
    )
    return plan


def plan_boundary(registry: FunctionRegistry) -> BoundaryDescriptor:
    """Collect every cross-boundary call in one pass over the registry.

    Entry points, proxies, transition routines and the EDL are all rendered
    from the returned descriptor, so their signatures cannot drift apart.
    """
    calls = [
        BoundaryCall(function=record, owner=owner)
        for owner in (Side.TRUSTED, Side.UNTRUSTED)
        for record in registry.by_label(owner.label)
    ]
    ecalls = tuple(c for c in calls if c.owner is Side.TRUSTED)
    ocalls = tuple(c for c in calls if c.owner is Side.UNTRUSTED)

    logger.info(f"Boundary: {len(ecalls)} ecalls, {len(ocalls)} ocalls")
    return BoundaryDescriptor(ecalls=ecalls, ocalls=ocalls)
