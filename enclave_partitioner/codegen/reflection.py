"""Generate native-image reflection configuration for each partition."""

import json
import logging

from enclave_partitioner.config import PartitionerConfig
from enclave_partitioner.models import Side
from enclave_partitioner.registry import FunctionRegistry

logger = logging.getLogger(__name__)


def reflect_config_file_name(side: Side) -> str:
    suffix = "in" if Side(side) is Side.TRUSTED else "out"
    return f"reflect-config-{suffix}.json"


def generate_reflect_config(
    registry: FunctionRegistry, side: Side, config: PartitionerConfig
) -> str:
    """Register every seen function's static method for reflection.

    The guest code looks the methods up through the class's static members,
    so native-image must keep them reachable.

    Returns:
        JSON of the form
        [{"name": "polytaint.Trusted",
          "methods": [{"name": "f", "parameterTypes": ["int"]}]}]
    """
    side = Side(side)
    entry = {
        "name": config.qualified_class(side),
        "methods": [
            {"name": record.simple_name, "parameterTypes": list(record.argument_types)}
            for record in registry.seen
        ],
    }
    logger.debug(
        f"Reflection config for {entry['name']}: {len(entry['methods'])} methods"
    )
    return json.dumps([entry], indent=2) + "\n"
