"""Infer native type names from values observed at runtime."""

import logging
from typing import Any

from enclave_partitioner.models import VOID

logger = logging.getLogger(__name__)

# Type used when an observed value has no native counterpart
DEFAULT_TYPE = "double"

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

# String renderings of "nothing returned" across guest runtimes
_VOID_MARKERS = ("<undefined>", "undefined", "None")


def infer_type(value: Any) -> str:
    """Map an observed argument value to a native type name.

    Args:
        value: A value captured by the tracker

    Returns:
        One of "boolean", "int", "long" or "double". Values with no native
        counterpart fall back to "double" and log a warning.
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "int" if INT_MIN <= value <= INT_MAX else "long"
    if isinstance(value, float):
        return "double"

    logger.warning(
        f"Unknown type for value {value!r} ({type(value).__name__}), "
        f"using '{DEFAULT_TYPE}'"
    )
    return DEFAULT_TYPE


def infer_return_type(result: Any) -> str:
    """Map an observed return value to a native type name.

    None, empty strings and the runtimes' renderings of "no value" map to
    "void"; everything else goes through infer_type().
    """
    if result is None:
        return VOID
    if isinstance(result, str) and (
        not result or any(marker in result for marker in _VOID_MARKERS)
    ):
        return VOID
    return infer_type(result)


def infer_argument_types(values: list[Any]) -> tuple[str, ...]:
    """Infer the positional parameter types of one observed call."""
    return tuple(infer_type(v) for v in values)
