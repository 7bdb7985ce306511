"""Partitioning pipeline: registry and source in, generated artifacts out."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from enclave_partitioner.codegen.program import (
    generate_full_image,
    generate_program,
    program_file_name,
)
from enclave_partitioner.codegen.reflection import (
    generate_reflect_config,
    reflect_config_file_name,
)
from enclave_partitioner.codegen.transitions import (
    generate_edl,
    generate_proxy_header,
    generate_proxy_module,
    native_layout,
)
from enclave_partitioner.config import PartitionerConfig
from enclave_partitioner.emitter import ArtifactSink
from enclave_partitioner.errors import PartitionerError
from enclave_partitioner.extractor import extract_remainder, read_source
from enclave_partitioner.models import (
    Artifact,
    EmissionError,
    PartitionResult,
    Side,
)
from enclave_partitioner.planner import plan_boundary
from enclave_partitioner.registry import FunctionRegistry

logger = logging.getLogger(__name__)


def build_artifacts(
    registry: FunctionRegistry,
    source: str,
    config: PartitionerConfig,
) -> tuple[list[Artifact], list[EmissionError]]:
    """Generate every artifact of a partitioned program in memory.

    An artifact whose generation fails is left out and reported; the
    others are still produced.

    Args:
        registry: Classified functions
        source: Guest program source
        config: Run configuration

    Returns:
        Tuple of (artifacts, errors)
    """
    main_source = extract_remainder(source, config.language)
    descriptor = plan_boundary(registry)

    # (artifact name, generator) in pipeline order
    steps: list[tuple[str, Callable[[], str]]] = []
    for side in Side:
        steps.append(
            (
                program_file_name(side),
                lambda side=side: generate_program(
                    registry, side, descriptor, main_source, config
                ),
            )
        )
    for side in Side:
        layout = native_layout(side)
        steps.append(
            (layout.module, lambda side=side: generate_proxy_module(descriptor, side))
        )
        steps.append(
            (layout.header, lambda side=side: generate_proxy_header(descriptor, side))
        )
    steps.append((config.edl_name, lambda: generate_edl(descriptor)))
    for side in Side:
        steps.append(
            (
                reflect_config_file_name(side),
                lambda side=side: generate_reflect_config(registry, side, config),
            )
        )

    artifacts: list[Artifact] = []
    errors: list[EmissionError] = []
    for name, generate in steps:
        try:
            artifacts.append(Artifact(name=name, content=generate()))
        except PartitionerError as e:
            logger.error(f"Could not generate {name}: {e}")
            errors.append(EmissionError(artifact=name, error=str(e), phase=e.phase))

    logger.info(f"Generated {len(artifacts)} artifacts, {len(errors)} failed")
    return artifacts, errors


async def partition_program(
    registry: FunctionRegistry,
    source_path: Path,
    config: PartitionerConfig,
) -> PartitionResult:
    """Partition a program and write every artifact to the output directory.

    Args:
        registry: Classified functions
        source_path: Guest program file
        config: Run configuration

    Returns:
        PartitionResult listing the written files and any errors
    """
    logger.info(f"Partitioning {source_path} into {config.output_dir}")
    result = _new_result(source_path, config)

    try:
        source = read_source(source_path)
    except PartitionerError as e:
        result.errors.append(EmissionError(artifact=None, error=str(e), phase=e.phase))
        return result

    artifacts, errors = build_artifacts(registry, source, config)
    result.errors.extend(errors)
    await _emit(artifacts, config, result)

    logger.info(
        f"Partitioning complete: {len(result.written)} written, "
        f"{len(result.errors)} errors"
    )
    return result


async def build_full_image(source_path: Path, config: PartitionerConfig) -> PartitionResult:
    """Write a single unpartitioned image of the program."""
    result = _new_result(source_path, config)

    try:
        source = read_source(source_path)
    except PartitionerError as e:
        result.errors.append(EmissionError(artifact=None, error=str(e), phase=e.phase))
        return result

    artifact = Artifact(
        name=program_file_name(Side.TRUSTED),
        content=generate_full_image(source, config),
    )
    await _emit([artifact], config, result)
    return result


def _new_result(source_path: Path, config: PartitionerConfig) -> PartitionResult:
    return PartitionResult(
        source=str(source_path),
        language=config.language.value,
        generated_at=datetime.now(UTC).isoformat(),
    )


async def _emit(
    artifacts: list[Artifact],
    config: PartitionerConfig,
    result: PartitionResult,
) -> None:
    """Write artifacts concurrently; a failed write only loses that artifact."""
    sink = ArtifactSink(config.output_dir)
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(sink.write, artifact) for artifact in artifacts),
        return_exceptions=True,
    )

    for artifact, outcome in zip(artifacts, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Failed to write {artifact.name}: {outcome}")
            result.errors.append(
                EmissionError(artifact=artifact.name, error=str(outcome), phase="emission")
            )
        else:
            result.written.append(str(outcome))
