"""Generate the Java program of each partition.

Each partition is a GraalVM native-image class. Every function the side
implements becomes a static method that evaluates the function's guest
source in a polyglot context; functions implemented by the other side
become static methods forwarding to a native proxy. Entry points expose
the side's own functions to the transition routines.
"""

import logging

from enclave_partitioner.codegen.signatures import (
    ISOLATE_PARAM,
    escape_java_string,
    local_invocation,
    param_signature,
    proxy_invocation,
    quote,
    return_accessor,
)
from enclave_partitioner.codegen.wrappers import WrapperSnippet, wrap_function, wrap_main
from enclave_partitioner.codegen.writer import GENERATED_NOTICE, CodeWriter
from enclave_partitioner.config import PartitionerConfig
from enclave_partitioner.extractor import minify
from enclave_partitioner.models import (
    BoundaryCall,
    BoundaryDescriptor,
    FunctionRecord,
    Side,
)
from enclave_partitioner.planner import plan_partition
from enclave_partitioner.registry import FunctionRegistry

logger = logging.getLogger(__name__)

IMPORTS = [
    "org.graalvm.nativeimage.CurrentIsolate",
    "org.graalvm.nativeimage.IsolateThread",
    "org.graalvm.nativeimage.c.function.CEntryPoint",
    "org.graalvm.nativeimage.c.function.CFunction",
    "org.graalvm.polyglot.*",
    "org.graalvm.polyglot.proxy.*",
]

CREATE_CONTEXT = "Context context = Context.newBuilder().allowAllAccess(true).build();"


def program_file_name(side: Side) -> str:
    return f"{side.class_name}.java"


def generate_program(
    registry: FunctionRegistry,
    side: Side,
    descriptor: BoundaryDescriptor,
    main_source: str,
    config: PartitionerConfig,
) -> str:
    """Generate the Java class for one partition.

    Args:
        registry: Classified functions
        side: Partition to generate
        descriptor: Boundary calls from plan_boundary()
        main_source: Top-level guest statements (see extractor)
        config: Run configuration

    Returns:
        Java source of Trusted.java or Untrusted.java
    """
    side = Side(side)
    plan = plan_partition(registry, side)
    proxied = {call.function: call for call in descriptor.called_from(side)}

    writer = CodeWriter()
    _write_preamble(writer, config)
    writer.line(f"public class {side.class_name} {{")
    writer.line()

    with writer.block():
        # The real main routine lives in the untrusted partition
        if side is Side.UNTRUSTED:
            _write_main(writer, registry, side, main_source, config)
        else:
            _write_placeholder_main(writer, side)
        writer.line()

        # Trusted, neutral, untrusted: same order on both sides
        for record in registry.trusted + registry.neutral + registry.untrusted:
            if plan.is_remote(record):
                _write_forwarding_method(writer, proxied[record])
            else:
                _write_local_method(writer, record, registry, side, config)
            writer.line()

        for call in descriptor.owned_by(side):
            _write_entry_point(writer, call)
            writer.line()

        for call in descriptor.called_from(side):
            _write_proxy_declaration(writer, call)

    writer.line("}")

    logger.info(
        f"Generated {program_file_name(side)}: {len(plan.local)} local methods, "
        f"{len(plan.remote)} proxied"
    )
    return writer.render()


def generate_full_image(source: str, config: PartitionerConfig) -> str:
    """Generate a single, unpartitioned class evaluating the whole program.

    Useful as a baseline: every function runs on the trusted side.
    """
    writer = CodeWriter()
    _write_preamble(writer, config)
    writer.line(f"public class {Side.TRUSTED.class_name} {{")
    writer.line()
    with writer.block():
        writer.line("public static void main(String[] args) {")
        with writer.block():
            writer.line(CREATE_CONTEXT)
            program = escape_java_string(minify(source, config.language))
            writer.line(
                f"Value ret = context.eval({quote(config.language.value)}, "
                f"{quote(program)});"
            )
        writer.line("}")
    writer.line("}")

    logger.info(f"Generated full image ({len(source)} chars of source)")
    return writer.render()


def _write_preamble(writer: CodeWriter, config: PartitionerConfig) -> None:
    writer.line(GENERATED_NOTICE)
    writer.line()
    writer.line(f"package {config.package};")
    writer.line()
    for name in IMPORTS:
        writer.line(f"import {name};")
    writer.line()


def _write_placeholder_main(writer: CodeWriter, side: Side) -> None:
    # native-image requires a main method in every image
    writer.line("public static void main(String[] args) {")
    with writer.block():
        writer.line(f'System.out.println("{side.class_name} partition: no main routine");')
    writer.line("}")


def _write_main(
    writer: CodeWriter,
    registry: FunctionRegistry,
    side: Side,
    main_source: str,
    config: PartitionerConfig,
) -> None:
    snippet = wrap_main(main_source, registry.seen, config.language)

    writer.line("public static void main(String[] args) {")
    with writer.block():
        writer.line(CREATE_CONTEXT)
        _bind_siblings(writer, registry.seen, side, exclude=None)
        writer.line(_eval_expression(snippet, config) + ";")
    writer.line("}")


def _write_local_method(
    writer: CodeWriter,
    record: FunctionRecord,
    registry: FunctionRegistry,
    side: Side,
    config: PartitionerConfig,
) -> None:
    snippet = wrap_function(record, registry.seen, config.language)
    signature = param_signature(record.parameters)

    writer.line(
        f"public static {record.return_type} {record.simple_name}{signature} {{"
    )
    with writer.block():
        writer.line(CREATE_CONTEXT)
        _bind_siblings(writer, registry.seen, side, exclude=record)
        evaluation = _eval_expression(snippet, config)
        if record.returns_value:
            writer.line(f"return {evaluation}.{return_accessor(record.return_type)};")
        else:
            writer.line(f"{evaluation};")
    writer.line("}")


def _write_forwarding_method(writer: CodeWriter, call: BoundaryCall) -> None:
    record = call.function
    signature = param_signature(record.parameters)
    statement = proxy_invocation(call) + ";"

    writer.line(
        f"public static {record.return_type} {record.simple_name}{signature} {{"
    )
    with writer.block():
        writer.line(f"return {statement}" if call.returns_value else statement)
    writer.line("}")


def _write_entry_point(writer: CodeWriter, call: BoundaryCall) -> None:
    record = call.function
    signature = param_signature(record.parameters, context=ISOLATE_PARAM)
    statement = local_invocation(record) + ";"

    writer.line(f"@CEntryPoint(name = {quote(call.entry_name)})")
    writer.line(f"public static {call.return_type} {call.entry_name}{signature} {{")
    with writer.block():
        writer.line(f"return {statement}" if call.returns_value else statement)
    writer.line("}")


def _write_proxy_declaration(writer: CodeWriter, call: BoundaryCall) -> None:
    signature = param_signature(call.parameters)
    writer.line("@CFunction")
    writer.line(
        f"public static native {call.return_type} {call.proxy_name}{signature};"
    )


def _bind_siblings(
    writer: CodeWriter,
    seen: tuple[FunctionRecord, ...],
    side: Side,
    exclude: FunctionRecord | None,
) -> None:
    """Resolve every seen function (except `exclude`) to a polyglot Value."""
    for sibling in seen:
        if exclude is not None and sibling.simple_name == exclude.simple_name:
            continue
        name = sibling.simple_name
        writer.line(
            f"Value {name} = context.asValue({side.class_name}.class)"
            f'.getMember("static").getMember({quote(name)});'
        )


def _eval_expression(snippet: WrapperSnippet, config: PartitionerConfig) -> str:
    code = escape_java_string(snippet.code)
    arguments = ", ".join(snippet.parameters)
    return (
        f"context.eval({quote(config.language.value)}, {quote(code)})"
        f".execute({arguments})"
    )
