"""Code generation for the two partitions and the glue between them."""

from enclave_partitioner.codegen.program import (
    generate_full_image,
    generate_program,
)
from enclave_partitioner.codegen.reflection import generate_reflect_config
from enclave_partitioner.codegen.transitions import (
    generate_edl,
    generate_proxy_header,
    generate_proxy_module,
)
from enclave_partitioner.codegen.wrappers import (
    WrapperSnippet,
    wrap_function,
    wrap_main,
)
from enclave_partitioner.codegen.writer import CodeWriter

__all__ = [
    # Writer
    "CodeWriter",
    # Guest snippets
    "WrapperSnippet",
    "wrap_function",
    "wrap_main",
    # Partition programs
    "generate_program",
    "generate_full_image",
    # Native glue
    "generate_proxy_module",
    "generate_proxy_header",
    "generate_edl",
    # Reflection
    "generate_reflect_config",
]
