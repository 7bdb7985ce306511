"""Tests for runtime type inference."""

import logging

from enclave_partitioner.type_inference import (
    infer_argument_types,
    infer_return_type,
    infer_type,
)


class TestInferType:
    def test_maps_native_values(self):
        """Booleans, integers and floats map to native types."""
        assert infer_type(True) == "boolean"
        assert infer_type(7) == "int"
        assert infer_type(2.5) == "double"

    def test_large_integers_are_long(self):
        assert infer_type(2**40) == "long"
        assert infer_type(-(2**31)) == "int"

    def test_unknown_values_fall_back_to_double(self, caplog):
        """Values without a native type become double with a warning."""
        with caplog.at_level(logging.WARNING):
            assert infer_type("text") == "double"
        assert "Unknown type" in caplog.text

    def test_infers_argument_list_in_order(self):
        assert infer_argument_types([1, 2.0, False]) == ("int", "double", "boolean")


class TestInferReturnType:
    def test_no_value_is_void(self):
        """None and the runtimes' empty values are void."""
        assert infer_return_type(None) == "void"
        assert infer_return_type("") == "void"
        assert infer_return_type("<undefined>") == "void"
        assert infer_return_type("None") == "void"

    def test_values_use_argument_mapping(self):
        assert infer_return_type(42) == "int"
        assert infer_return_type(False) == "boolean"
