"""Render parameter lists, invocations and result conversions.

Every generated artifact formats signatures through these helpers, so a
function's parameters read the same in each of them.
"""

import logging
from collections.abc import Sequence

from enclave_partitioner.errors import GenerationError
from enclave_partitioner.models import BoundaryCall, FunctionRecord

logger = logging.getLogger(__name__)

# Execution-context parameter every GraalVM entry point takes first
ISOLATE_PARAM = "IsolateThread thread"

# Enclave id the untrusted side passes to every ecall
ENCLAVE_ID = "global_eid"

# Out-parameter that receives a transition's result
RET_OUT = "&ret"

# Polyglot Value accessor for each declared return type
RETURN_ACCESSORS = {
    "bool": "asBoolean()",
    "boolean": "asBoolean()",
    "byte": "asByte()",
    "short": "asShort()",
    "float": "asFloat()",
    "int": "asInt()",
    "long": "asLong()",
    "double": "asDouble()",
}

# Unknown return types are read as long
DEFAULT_ACCESSOR = "asLong()"


def return_accessor(return_type: str) -> str:
    """Return the Value accessor converting a result to `return_type`."""
    accessor = RETURN_ACCESSORS.get(return_type)
    if accessor is None:
        logger.debug(f"No accessor for '{return_type}', using {DEFAULT_ACCESSOR}")
        return DEFAULT_ACCESSOR
    return accessor


def param_signature(
    parameters: Sequence[tuple[str, str]], context: str | None = None
) -> str:
    """Render a declaration parameter list: "(int param1, double param2)".

    Args:
        parameters: [(name, type), ...]
        context: Optional leading parameter, e.g. the isolate thread
    """
    declared = [f"{arg_type} {name}" for name, arg_type in parameters]
    if context:
        declared.insert(0, context)
    return f"({', '.join(declared)})"


def call_arguments(arguments: Sequence[str]) -> str:
    """Render a call argument list: "(param1, param2)"."""
    return f"({', '.join(arguments)})"


def local_invocation(record: FunctionRecord) -> str:
    """Call of a same-side function: "encrypt(param1, param2)"."""
    return record.simple_name + call_arguments(record.parameter_names)


def proxy_invocation(call: BoundaryCall) -> str:
    """Call of the native proxy standing in for a remote function."""
    return call.proxy_name + call_arguments(call.function.parameter_names)


def entry_invocation(call: BoundaryCall, isolate: str) -> str:
    """Call of an entry point from its transition routine."""
    return call.entry_name + call_arguments([isolate, *call.function.parameter_names])


def transition_invocation(call: BoundaryCall) -> str:
    """Call of a transition routine from the caller's proxy.

    Ecalls take the enclave id first; a caller-allocated result slot
    follows when the function returns a value.
    """
    arguments = []
    if call.direction == "ecall":
        arguments.append(ENCLAVE_ID)
    if call.returns_value:
        arguments.append(RET_OUT)
    arguments.extend(call.function.parameter_names)
    return call.transition_name + call_arguments(arguments)


def wrapper_parameters(
    record: FunctionRecord, seen: Sequence[FunctionRecord]
) -> list[str]:
    """Formal parameters of a function's guest wrapper.

    Every other seen function, in seen order, followed by the function's
    own positional parameters. The wrapper's literal and its execute()
    call both use this list, so the order binds siblings positionally.

    Raises:
        GenerationError: If nothing was seen
    """
    if not seen:
        raise GenerationError(
            f"Cannot wrap {record.qualified_name}: no functions were seen"
        )
    siblings = [g.simple_name for g in seen if g.simple_name != record.simple_name]
    return siblings + record.parameter_names


def main_wrapper_parameters(seen: Sequence[FunctionRecord]) -> list[str]:
    """Formal parameters of the main wrapper: every seen function in order."""
    return [g.simple_name for g in seen]


def escape_java_string(text: str) -> str:
    """Escape text for a double-quoted Java string literal."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def quote(text: str) -> str:
    return f'"{text}"'
