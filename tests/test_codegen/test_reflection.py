"""Tests for reflection configuration."""

import json
from pathlib import Path

import pytest

from enclave_partitioner.codegen.reflection import (
    generate_reflect_config,
    reflect_config_file_name,
)
from enclave_partitioner.config import PartitionerConfig
from enclave_partitioner.models import Side
from enclave_partitioner.registry import load_registry


@pytest.fixture
def registry():
    return load_registry(
        Path(__file__).parent.parent / "fixtures" / "programs" / "app.json"
    )


class TestReflectConfig:
    def test_registers_every_seen_function(self, registry):
        """Each seen function is listed with its parameter types."""
        config = json.loads(
            generate_reflect_config(registry, Side.TRUSTED, PartitionerConfig())
        )

        assert len(config) == 1
        assert config[0]["name"] == "polytaint.Trusted"
        assert config[0]["methods"][0] == {
            "name": "add",
            "parameterTypes": ["int", "int"],
        }
        assert [m["name"] for m in config[0]["methods"]] == [
            "add",
            "encrypt",
            "log",
            "readInput",
            "checkPin",
        ]

    def test_untrusted_config_names_untrusted_class(self, registry):
        config = json.loads(
            generate_reflect_config(
                registry, Side.UNTRUSTED, PartitionerConfig(package="demo")
            )
        )
        assert config[0]["name"] == "demo.Untrusted"

    def test_file_names(self):
        assert reflect_config_file_name(Side.TRUSTED) == "reflect-config-in.json"
        assert reflect_config_file_name(Side.UNTRUSTED) == "reflect-config-out.json"
