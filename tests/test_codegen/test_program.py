"""Tests for the partition program generator."""

from pathlib import Path

import pytest

from enclave_partitioner.codegen.program import generate_full_image, generate_program
from enclave_partitioner.config import PartitionerConfig
from enclave_partitioner.errors import GenerationError
from enclave_partitioner.extractor import extract_remainder
from enclave_partitioner.models import FunctionRecord, GuestLanguage, Side, TrustLabel
from enclave_partitioner.planner import plan_boundary
from enclave_partitioner.registry import FunctionRegistry, load_registry


@pytest.fixture
def fixtures_path():
    return Path(__file__).parent.parent / "fixtures" / "programs"


class TestGenerateProgram:
    def given_sample_program(self, fixtures_path):
        self.registry = load_registry(fixtures_path / "app.json")
        source = (fixtures_path / "app.js").read_text()
        self.main_source = extract_remainder(source, GuestLanguage.JS)
        self.config = PartitionerConfig()

    def when_generated(self, side):
        self.code = generate_program(
            self.registry,
            side,
            plan_boundary(self.registry),
            self.main_source,
            self.config,
        )

    def then_contains(self, *fragments):
        for fragment in fragments:
            assert fragment in self.code

    def test_untrusted_forwards_trusted_functions_to_proxies(self, fixtures_path):
        """Functions owned by the enclave become proxy forwards."""
        self.given_sample_program(fixtures_path)
        self.when_generated(Side.UNTRUSTED)
        self.then_contains(
            "public static int encrypt(int param1, int param2) {",
            "return encrypt_proxy(param1, param2);",
            "@CFunction",
            "public static native int encrypt_proxy(int param1, int param2);",
            "public static native boolean checkPin_proxy(int param1);",
        )

    def test_untrusted_exposes_own_functions_as_entry_points(self, fixtures_path):
        self.given_sample_program(fixtures_path)
        self.when_generated(Side.UNTRUSTED)
        self.then_contains(
            '@CEntryPoint(name = "log_entry")',
            "public static void log_entry(IsolateThread thread, double param1) {",
            "        log(param1);",
            "public static int readInput_entry(IsolateThread thread) {",
            "return readInput();",
        )

    def test_untrusted_main_binds_every_seen_function(self, fixtures_path):
        """The main routine lives on the untrusted side."""
        self.given_sample_program(fixtures_path)
        self.when_generated(Side.UNTRUSTED)
        self.then_contains(
            "public static void main(String[] args) {",
            "function main_wrapper(add,encrypt,log,readInput,checkPin){",
            ".execute(add, encrypt, log, readInput, checkPin);",
            'Value checkPin = context.asValue(Untrusted.class)'
            '.getMember("static").getMember("checkPin");',
        )

    def test_local_methods_evaluate_wrapped_source(self, fixtures_path):
        """Local functions evaluate their wrapper with siblings bound."""
        self.given_sample_program(fixtures_path)
        self.when_generated(Side.UNTRUSTED)
        self.then_contains(
            "public static void log(double param1) {",
            "function log_wrapper(add,encrypt,readInput,checkPin,param1){",
            ".execute(add, encrypt, readInput, checkPin, param1);",
            ".execute(add, encrypt, log, checkPin).asInt();",
        )

    def test_trusted_side_has_placeholder_main(self, fixtures_path):
        self.given_sample_program(fixtures_path)
        self.when_generated(Side.TRUSTED)
        self.then_contains(
            "public class Trusted {",
            'System.out.println("Trusted partition: no main routine");',
        )
        assert "main_wrapper" not in self.code

    def test_trusted_side_converts_results(self, fixtures_path):
        """Results are converted with the accessor of the return type."""
        self.given_sample_program(fixtures_path)
        self.when_generated(Side.TRUSTED)
        self.then_contains(
            ".execute(add, encrypt, log, readInput, param1).asBoolean();",
            "return readInput_proxy();",
            "public static native void log_proxy(double param1);",
            '@CEntryPoint(name = "encrypt_entry")',
        )

    def test_neutral_functions_are_local_on_both_sides(self, fixtures_path):
        self.given_sample_program(fixtures_path)
        for side in Side:
            self.when_generated(side)
            self.then_contains("function add_wrapper(")
            assert "add_proxy" not in self.code

    def test_preamble_declares_package(self, fixtures_path):
        self.given_sample_program(fixtures_path)
        self.config = PartitionerConfig(package="demo")
        self.when_generated(Side.TRUSTED)
        self.then_contains("package demo;", "import org.graalvm.polyglot.*;")

    def test_unknown_return_type_reads_as_long(self):
        f = FunctionRecord("app.js.name", TrustLabel.TRUSTED, (), "String")
        registry = FunctionRegistry([f], [], [], [f])

        code = generate_program(
            registry, Side.TRUSTED, plan_boundary(registry), "", PartitionerConfig()
        )

        assert ".execute().asLong();" in code

    def test_empty_seen_raises(self):
        f = FunctionRecord("app.js.f", TrustLabel.TRUSTED)
        registry = FunctionRegistry([f], [], [], [])

        with pytest.raises(GenerationError):
            generate_program(
                registry, Side.TRUSTED, plan_boundary(registry), "", PartitionerConfig()
            )


class TestGenerateFullImage:
    def test_evaluates_whole_program_on_trusted_side(self):
        code = generate_full_image('function f(){}\nprint("hi");\n', PartitionerConfig())

        assert "public class Trusted {" in code
        assert 'Value ret = context.eval("js", "function f(){}print(\\"hi\\");");' in code
