"""Tests for partition and boundary planning."""

from pathlib import Path

import pytest

from enclave_partitioner.models import Side
from enclave_partitioner.planner import plan_boundary, plan_partition
from enclave_partitioner.registry import load_registry


@pytest.fixture
def registry():
    return load_registry(Path(__file__).parent / "fixtures" / "programs" / "app.json")


def names(records):
    return [r.simple_name for r in records]


class TestPlanPartition:
    def given_plans(self, registry):
        self.trusted = plan_partition(registry, Side.TRUSTED)
        self.untrusted = plan_partition(registry, Side.UNTRUSTED)

    def test_trusted_side_implements_own_and_neutral(self, registry):
        self.given_plans(registry)
        assert names(self.trusted.local) == ["encrypt", "checkPin", "add"]
        assert names(self.trusted.remote) == ["log", "readInput"]
        assert names(self.trusted.exported) == ["encrypt", "checkPin"]

    def test_untrusted_side_implements_own_and_neutral(self, registry):
        self.given_plans(registry)
        assert names(self.untrusted.local) == ["log", "readInput", "add"]
        assert names(self.untrusted.remote) == ["encrypt", "checkPin"]

    def test_labelled_functions_are_local_to_exactly_one_side(self, registry):
        """Trusted and untrusted functions never run on both sides."""
        self.given_plans(registry)
        for record in registry.trusted + registry.untrusted:
            local_on = [
                plan.side
                for plan in (self.trusted, self.untrusted)
                if record in plan.local
            ]
            assert len(local_on) == 1

    def test_neutral_functions_are_local_everywhere(self, registry):
        """Neutral functions are implemented on both sides, never proxied."""
        self.given_plans(registry)
        for record in registry.neutral:
            assert record in self.trusted.local
            assert record in self.untrusted.local
            assert not self.trusted.is_remote(record)
            assert not self.untrusted.is_remote(record)

    def test_accepts_side_value(self, registry):
        assert plan_partition(registry, "trusted").side is Side.TRUSTED


class TestPlanBoundary:
    def test_ecalls_and_ocalls_in_tracker_order(self, registry):
        descriptor = plan_boundary(registry)

        assert [c.simple_name for c in descriptor.ecalls] == ["encrypt", "checkPin"]
        assert [c.simple_name for c in descriptor.ocalls] == ["log", "readInput"]

    def test_neutral_functions_never_cross(self, registry):
        descriptor = plan_boundary(registry)
        assert "add" not in [c.simple_name for c in descriptor.calls]
