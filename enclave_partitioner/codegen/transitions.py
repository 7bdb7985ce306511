"""Generate the native transition glue and the enclave boundary descriptor.

A call from one partition into the other runs:

    static method -> <name>_proxy -> ecall_/ocall_<name> -> <name>_entry

The proxies live in the caller's native module, the transition routines in
the owner's. Both, the proxy headers and the EDL are rendered from the same
BoundaryDescriptor.
"""

import logging
from typing import NamedTuple

from enclave_partitioner.codegen.signatures import (
    entry_invocation,
    param_signature,
    quote,
    transition_invocation,
)
from enclave_partitioner.codegen.writer import GENERATED_NOTICE, CodeWriter
from enclave_partitioner.models import BoundaryCall, BoundaryDescriptor, Side

logger = logging.getLogger(__name__)


class NativeLayout(NamedTuple):
    """File names and runtime symbols of one side's native module."""

    module: str
    header: str
    guard: str
    includes: tuple[str, ...]
    externs: tuple[str, ...]
    isolate: str


NATIVE_LAYOUTS: dict[Side, NativeLayout] = {
    Side.TRUSTED: NativeLayout(
        module="Proxy_In.cpp",
        header="Proxy_In.h",
        guard="__PROXY_IN_H",
        includes=("Proxy_In.h", "checks.h", "../../Enclave.h", "graal_isolate.h", "main.h"),
        externs=("graal_isolatethread_t *global_enc_iso",),
        isolate="global_enc_iso",
    ),
    Side.UNTRUSTED: NativeLayout(
        module="Proxy_Out.cpp",
        header="Proxy_Out.h",
        guard="__PROXY_OUT_H",
        includes=("Proxy_Out.h", "graal_isolate.h", "Enclave_u.h", "main.h"),
        externs=("sgx_enclave_id_t global_eid", "graal_isolatethread_t *global_app_iso"),
        isolate="global_app_iso",
    ),
}


def native_layout(side: Side) -> NativeLayout:
    return NATIVE_LAYOUTS[Side(side)]


def generate_proxy_module(descriptor: BoundaryDescriptor, side: Side) -> str:
    """Generate a side's native module.

    It defines the transition routines for the calls the side owns, each
    forwarding to the matching entry point with the side's isolate, and the
    proxies for the calls the side makes, each invoking the transition into
    the other partition.

    Args:
        descriptor: Boundary calls from plan_boundary()
        side: Partition whose module is generated

    Returns:
        C++ source of Proxy_In.cpp or Proxy_Out.cpp
    """
    layout = native_layout(side)
    writer = CodeWriter()

    writer.line(GENERATED_NOTICE)
    writer.line()
    for header in layout.includes:
        writer.line(f"#include {quote(header)}")
    writer.line()
    for extern in layout.externs:
        writer.line(f"extern {extern};")
    writer.line()

    owned = descriptor.owned_by(side)
    for call in owned:
        _write_transition_routine(writer, call, layout.isolate)
        writer.line()

    called = descriptor.called_from(side)
    for call in called:
        _write_proxy_body(writer, call)
        writer.line()

    logger.info(
        f"Generated {layout.module}: {len(owned)} transition routines, "
        f"{len(called)} proxies"
    )
    return writer.render()


def generate_proxy_header(descriptor: BoundaryDescriptor, side: Side) -> str:
    """Generate the C-linkage prototypes of a side's proxies."""
    layout = native_layout(side)
    writer = CodeWriter()

    writer.line(f"#ifndef {layout.guard}")
    writer.line(f"#define {layout.guard}")
    writer.line()
    writer.lines(["#if defined(__cplusplus)", 'extern "C" {', "#endif"])
    writer.line()

    for call in descriptor.called_from(side):
        writer.line(f"{_proxy_prototype(call)};")
    writer.line()

    writer.lines(["#if defined(__cplusplus)", "}", "#endif"])
    writer.line()
    writer.line("#endif")
    return writer.render()


def generate_edl(descriptor: BoundaryDescriptor) -> str:
    """Generate the EDL listing every ecall and ocall prototype."""
    writer = CodeWriter()

    writer.line(GENERATED_NOTICE)
    writer.line()
    writer.line("enclave {")
    with writer.block():
        writer.line("trusted {")
        with writer.block():
            for call in descriptor.ecalls:
                writer.line(f"public {_transition_prototype(call)};")
        writer.line("};")
        writer.line()

        writer.line("untrusted {")
        with writer.block():
            for call in descriptor.ocalls:
                writer.line(f"{_transition_prototype(call)};")
        writer.line("};")
    writer.line("};")

    logger.info(
        f"Generated EDL: {len(descriptor.ecalls)} ecalls, "
        f"{len(descriptor.ocalls)} ocalls"
    )
    return writer.render()


def _transition_prototype(call: BoundaryCall) -> str:
    return f"{call.return_type} {call.transition_name}{param_signature(call.parameters)}"


def _proxy_prototype(call: BoundaryCall) -> str:
    return f"{call.return_type} {call.proxy_name}{param_signature(call.parameters)}"


def _write_transition_routine(writer: CodeWriter, call: BoundaryCall, isolate: str) -> None:
    statement = entry_invocation(call, isolate) + ";"
    writer.line(f"{_transition_prototype(call)} {{")
    with writer.block():
        writer.line(f"return {statement}" if call.returns_value else statement)
    writer.line("}")


def _write_proxy_body(writer: CodeWriter, call: BoundaryCall) -> None:
    writer.line(f"{_proxy_prototype(call)} {{")
    with writer.block():
        if call.returns_value:
            writer.line(f"{call.return_type} ret;")
            writer.line(f"{transition_invocation(call)};")
            writer.line("return ret;")
        else:
            writer.line(f"{transition_invocation(call)};")
    writer.line("}")
