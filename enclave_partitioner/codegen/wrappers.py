"""Build the guest-language snippets evaluated by each partition.

A wrapper is a named function literal whose parameters are the sibling
functions (bound to their host callables) followed by the target's own
arguments. Evaluating the snippet yields the wrapper itself, which the host
then executes.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from enclave_partitioner.codegen.signatures import (
    local_invocation,
    main_wrapper_parameters,
    wrapper_parameters,
)
from enclave_partitioner.errors import GenerationError
from enclave_partitioner.models import FunctionRecord, GuestLanguage

logger = logging.getLogger(__name__)

MAIN_WRAPPER = "main_wrapper"

PYTHON_INDENT = "    "


@dataclass(frozen=True)
class WrapperSnippet:
    """Guest code for one wrapper and the parameters it binds, in order."""

    name: str
    parameters: tuple[str, ...]
    code: str


def wrap_function(
    record: FunctionRecord,
    seen: Sequence[FunctionRecord],
    language: GuestLanguage,
) -> WrapperSnippet:
    """Wrap a function definition so it can be evaluated on its own.

    Args:
        record: Function to wrap
        seen: Every seen function, in tracker order
        language: Guest language of the source

    Returns:
        The wrapper snippet named "<simple_name>_wrapper"
    """
    name = f"{record.simple_name}_wrapper"
    parameters = tuple(wrapper_parameters(record, seen))
    call = local_invocation(record)
    statement = f"return {call}" if record.returns_value else call

    language = GuestLanguage(language)
    if language is GuestLanguage.JS:
        code = _js_literal(name, parameters, [record.source_text, f"{statement};"])
    elif language is GuestLanguage.PYTHON:
        code = _python_literal(name, parameters, [record.source_text, statement])
    else:
        raise GenerationError(f"Unsupported guest language: {language}")

    logger.debug(f"Wrapped {record.qualified_name} as {name}({','.join(parameters)})")
    return WrapperSnippet(name=name, parameters=parameters, code=code)


def wrap_main(
    main_source: str,
    seen: Sequence[FunctionRecord],
    language: GuestLanguage,
) -> WrapperSnippet:
    """Wrap the program's top-level statements as "main_wrapper".

    Its parameters are exactly the seen functions, in order.
    """
    parameters = tuple(main_wrapper_parameters(seen))

    language = GuestLanguage(language)
    if language is GuestLanguage.JS:
        code = _js_literal(MAIN_WRAPPER, parameters, [main_source])
    elif language is GuestLanguage.PYTHON:
        code = _python_literal(MAIN_WRAPPER, parameters, [main_source])
    else:
        raise GenerationError(f"Unsupported guest language: {language}")

    return WrapperSnippet(name=MAIN_WRAPPER, parameters=parameters, code=code)


def _js_literal(name: str, parameters: Sequence[str], body: list[str]) -> str:
    lines = [f"function {name}({','.join(parameters)}){{", *body, "}", f"{name};"]
    return "\n".join(lines)


def _python_literal(name: str, parameters: Sequence[str], body: list[str]) -> str:
    lines = [f"def {name}({','.join(parameters)}):"]
    for chunk in body:
        for text in chunk.splitlines():
            lines.append(f"{PYTHON_INDENT}{text}" if text.strip() else "")
    if not any(text.strip() for text in lines[1:]):
        lines.append(f"{PYTHON_INDENT}pass")
    lines.extend(["", name])
    return "\n".join(lines)
