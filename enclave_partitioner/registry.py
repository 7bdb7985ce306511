"""Read-only view over the taint tracker's classified functions."""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from enclave_partitioner.errors import RegistryError
from enclave_partitioner.models import VOID, FunctionRecord, TrustLabel
from enclave_partitioner.type_inference import (
    infer_argument_types,
    infer_return_type,
)

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """The four function lists produced by the tracker, in tracker order.

    Trusted, untrusted and neutral functions are materialized as tuples and
    never modified. Seen holds every function observed executing, whatever
    its label; its order fixes the sibling parameter list of every wrapper.
    """

    def __init__(
        self,
        trusted: Iterable[FunctionRecord],
        untrusted: Iterable[FunctionRecord],
        neutral: Iterable[FunctionRecord],
        seen: Iterable[FunctionRecord],
    ):
        self._trusted = _values(trusted)
        self._untrusted = _values(untrusted)
        self._neutral = _values(neutral)
        self._seen = _values(seen)
        self._by_simple_name = self._index_simple_names()
        self._check_seen_names()
        logger.info(
            f"Registry loaded: {len(self._trusted)} trusted, "
            f"{len(self._untrusted)} untrusted, {len(self._neutral)} neutral, "
            f"{len(self._seen)} seen"
        )

    @property
    def trusted(self) -> tuple[FunctionRecord, ...]:
        return self._trusted

    @property
    def untrusted(self) -> tuple[FunctionRecord, ...]:
        return self._untrusted

    @property
    def neutral(self) -> tuple[FunctionRecord, ...]:
        return self._neutral

    @property
    def seen(self) -> tuple[FunctionRecord, ...]:
        return self._seen

    def by_label(self, label: TrustLabel) -> tuple[FunctionRecord, ...]:
        if label is TrustLabel.TRUSTED:
            return self._trusted
        if label is TrustLabel.UNTRUSTED:
            return self._untrusted
        return self._neutral

    def lookup(self, simple_name: str) -> FunctionRecord | None:
        """Find a classified function by its simple name."""
        return self._by_simple_name.get(simple_name)

    def _index_simple_names(self) -> dict[str, FunctionRecord]:
        index: dict[str, FunctionRecord] = {}
        for record in self._trusted + self._untrusted + self._neutral:
            other = index.get(record.simple_name)
            if other is not None:
                raise RegistryError(
                    f"Simple name '{record.simple_name}' is shared by "
                    f"{other.qualified_name} and {record.qualified_name}"
                )
            index[record.simple_name] = record
        return index

    def _check_seen_names(self) -> None:
        """Seen functions must be classified and appear once each."""
        seen_names: set[str] = set()
        for record in self._seen:
            if self.lookup(record.simple_name) != record:
                raise RegistryError(
                    f"Seen function '{record.qualified_name}' is not classified"
                )
            if record.simple_name in seen_names:
                raise RegistryError(
                    f"Seen function '{record.simple_name}' appears more than once"
                )
            seen_names.add(record.simple_name)

    @classmethod
    def from_tracker_output(cls, data: Mapping[str, Any]) -> "FunctionRegistry":
        """Build a registry from the tracker's JSON output.

        Each of "trusted", "untrusted" and "neutral" is a list of records or
        an object mapping names to records. "seen" entries may be records or
        bare qualified names; both must name classified functions.

        Raises:
            RegistryError: If the output is malformed
        """
        if not isinstance(data, Mapping):
            raise RegistryError(
                f"Tracker output must be an object, got {type(data).__name__}"
            )

        classified = {
            label: [
                _parse_record(raw, label) for raw in _entries(data, label.value)
            ]
            for label in TrustLabel
        }
        by_name = {
            record.qualified_name: record
            for records in classified.values()
            for record in records
        }

        seen = []
        for raw in _entries(data, "seen"):
            name = raw if isinstance(raw, str) else _require_name(raw)
            if name not in by_name:
                raise RegistryError(f"Seen function '{name}' is not classified")
            seen.append(by_name[name])

        return cls(
            trusted=classified[TrustLabel.TRUSTED],
            untrusted=classified[TrustLabel.UNTRUSTED],
            neutral=classified[TrustLabel.NEUTRAL],
            seen=seen,
        )


def load_registry(path: Path) -> FunctionRegistry:
    """Load a registry from a tracker output file.

    Raises:
        RegistryError: If the file is missing, not JSON, or malformed
    """
    logger.info(f"Loading tracker output from {path}")
    try:
        data = json.loads(Path(path).read_text())
    except OSError as e:
        raise RegistryError(f"Cannot read tracker output {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RegistryError(f"Tracker output {path} is not valid JSON: {e}") from e
    return FunctionRegistry.from_tracker_output(data)


def _values(records: Iterable[FunctionRecord]) -> tuple[FunctionRecord, ...]:
    if isinstance(records, Mapping):
        return tuple(records.values())
    return tuple(records)


def _entries(data: Mapping[str, Any], key: str) -> list[Any]:
    raw = data.get(key, [])
    if isinstance(raw, Mapping):
        return list(raw.values())
    if not isinstance(raw, list):
        raise RegistryError(f"'{key}' must be a list or an object")
    return raw


def _require_name(raw: Any) -> str:
    if not isinstance(raw, Mapping) or not raw.get("name"):
        raise RegistryError(f"Function record missing 'name': {raw!r}")
    if not isinstance(raw["name"], str):
        raise RegistryError(f"Function name must be a string: {raw['name']!r}")
    return raw["name"]


def _require_field(raw: Mapping[str, Any], key: str, valid: bool, expected: str) -> None:
    if not valid:
        raise RegistryError(
            f"Field '{key}' of {raw['name']} must be {expected}, got {raw[key]!r}"
        )


def _parse_record(raw: Any, label: TrustLabel) -> FunctionRecord:
    """Parse one tracker record, inferring types from samples if needed."""
    name = _require_name(raw)

    if "argumentTypes" in raw:
        types = raw["argumentTypes"]
        _require_field(
            raw,
            "argumentTypes",
            isinstance(types, list) and all(isinstance(t, str) and t for t in types),
            "a list of type names",
        )
        argument_types = tuple(types)
    else:
        observed = raw.get("observedArguments", [])
        _require_field(raw, "observedArguments", isinstance(observed, list), "a list")
        argument_types = infer_argument_types(observed)

    if "returnType" in raw:
        _require_field(
            raw,
            "returnType",
            raw["returnType"] is None or isinstance(raw["returnType"], str),
            "a type name or null",
        )
        return_type = raw["returnType"] or VOID
    elif "observedReturn" in raw:
        return_type = infer_return_type(raw["observedReturn"])
    else:
        return_type = VOID

    if "source" in raw:
        _require_field(raw, "source", isinstance(raw["source"], str), "a string")

    record = FunctionRecord(
        qualified_name=name,
        label=label,
        argument_types=argument_types,
        return_type=return_type,
        source_text=raw.get("source", ""),
        is_main_symbol=bool(raw.get("isMainSymbol", False)),
    )
    logger.debug(
        f"Parsed {label.value} function: {name}"
        f"({', '.join(argument_types)}) -> {return_type}"
    )
    return record
