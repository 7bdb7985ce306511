"""Tests for the partitioning pipeline."""

from pathlib import Path

import pytest

from enclave_partitioner.config import PartitionerConfig
from enclave_partitioner.partitioner import (
    build_artifacts,
    build_full_image,
    partition_program,
)
from enclave_partitioner.registry import FunctionRegistry, load_registry

ARTIFACT_NAMES = {
    "Trusted.java",
    "Untrusted.java",
    "Proxy_In.cpp",
    "Proxy_In.h",
    "Proxy_Out.cpp",
    "Proxy_Out.h",
    "Enclave.edl",
    "reflect-config-in.json",
    "reflect-config-out.json",
}


@pytest.fixture
def fixtures_path():
    return Path(__file__).parent / "fixtures" / "programs"


class TestBuildArtifacts:
    def given_sample_program(self, fixtures_path):
        self.registry = load_registry(fixtures_path / "app.json")
        self.source = (fixtures_path / "app.js").read_text()

    def when_built(self):
        self.artifacts, self.errors = build_artifacts(
            self.registry, self.source, PartitionerConfig()
        )

    def test_builds_every_artifact(self, fixtures_path):
        self.given_sample_program(fixtures_path)
        self.when_built()

        assert {a.name for a in self.artifacts} == ARTIFACT_NAMES
        assert self.errors == []

    def test_failed_generator_only_loses_its_artifact(self, fixtures_path):
        """With nothing seen, the programs fail but the glue is still built."""
        self.given_sample_program(fixtures_path)
        self.registry = FunctionRegistry(
            self.registry.trusted, self.registry.untrusted, self.registry.neutral, []
        )
        self.when_built()

        assert {e.artifact for e in self.errors} == {"Trusted.java", "Untrusted.java"}
        assert all(e.phase == "generation" for e in self.errors)
        assert len(self.artifacts) == 7

    def test_edl_name_comes_from_config(self, fixtures_path):
        self.given_sample_program(fixtures_path)
        artifacts, _ = build_artifacts(
            self.registry, self.source, PartitionerConfig(edl_name="App.edl")
        )
        assert "App.edl" in {a.name for a in artifacts}


class TestPartitionProgram:
    def given_sample_program(self, fixtures_path, tmp_path):
        self.registry = load_registry(fixtures_path / "app.json")
        self.source_path = fixtures_path / "app.js"
        self.output_dir = tmp_path / "out"
        self.config = PartitionerConfig(output_dir=self.output_dir)

    async def when_partitioned(self):
        self.result = await partition_program(
            self.registry, self.source_path, self.config
        )

    @pytest.mark.asyncio
    async def test_writes_every_artifact(self, fixtures_path, tmp_path):
        """All artifacts are written to the output directory."""
        self.given_sample_program(fixtures_path, tmp_path)
        await self.when_partitioned()

        assert self.result.ok
        assert {Path(p).name for p in self.result.written} == ARTIFACT_NAMES
        assert {p.name for p in self.output_dir.iterdir()} == ARTIFACT_NAMES

    @pytest.mark.asyncio
    async def test_missing_source_is_a_loading_error(self, fixtures_path, tmp_path):
        self.given_sample_program(fixtures_path, tmp_path)
        self.source_path = tmp_path / "missing.js"
        await self.when_partitioned()

        assert self.result.written == []
        assert len(self.result.errors) == 1
        assert self.result.errors[0].artifact is None
        assert self.result.errors[0].phase == "loading"

    @pytest.mark.asyncio
    async def test_failed_write_keeps_other_artifacts(self, fixtures_path, tmp_path):
        """One unwritable artifact does not stop the others."""
        self.given_sample_program(fixtures_path, tmp_path)
        (self.output_dir / "Enclave.edl").mkdir(parents=True)
        await self.when_partitioned()

        assert [(e.artifact, e.phase) for e in self.result.errors] == [
            ("Enclave.edl", "emission")
        ]
        assert len(self.result.written) == 8
        assert (self.output_dir / "Trusted.java").is_file()


class TestBuildFullImage:
    @pytest.mark.asyncio
    async def test_writes_single_trusted_class(self, fixtures_path, tmp_path):
        config = PartitionerConfig(output_dir=tmp_path)

        result = await build_full_image(fixtures_path / "app.js", config)

        assert result.ok
        assert [Path(p).name for p in result.written] == ["Trusted.java"]
        assert "context.eval(" in (tmp_path / "Trusted.java").read_text()
