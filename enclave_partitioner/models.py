"""Data models for partitioning a program across the enclave boundary."""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum

VOID = "void"


class TrustLabel(str, Enum):
    """Classification assigned to a function by the taint tracker."""

    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"
    NEUTRAL = "neutral"


class Side(str, Enum):
    """One of the two generated partitions."""

    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"

    @property
    def opposite(self) -> "Side":
        return Side.UNTRUSTED if self is Side.TRUSTED else Side.TRUSTED

    @property
    def label(self) -> TrustLabel:
        """The trust label owned by this side."""
        return TrustLabel(self.value)

    @property
    def class_name(self) -> str:
        return "Trusted" if self is Side.TRUSTED else "Untrusted"


class GuestLanguage(str, Enum):
    """Guest languages whose sources can be partitioned."""

    JS = "js"
    PYTHON = "python"


@dataclass(frozen=True)
class FunctionRecord:
    """A guest function observed by the taint tracker.

    Attributes:
        qualified_name: Dotted name, e.g. "app.js.encrypt"
        label: Trust classification of the function
        argument_types: Positional parameter types inferred at runtime
        return_type: Inferred return type, "void" when nothing was returned
        source_text: Verbatim source of the function definition
        is_main_symbol: Whether the tracker flagged this as the main symbol
    """

    qualified_name: str
    label: TrustLabel
    argument_types: tuple[str, ...] = ()
    return_type: str = VOID
    source_text: str = ""
    is_main_symbol: bool = False

    @property
    def simple_name(self) -> str:
        """Name after the last separator: "app.js.encrypt" -> "encrypt"."""
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def returns_value(self) -> bool:
        return self.return_type != VOID

    @property
    def parameters(self) -> list[tuple[str, str]]:
        """Positional parameters as [(name, type), ...]."""
        return [
            (f"param{i}", arg_type)
            for i, arg_type in enumerate(self.argument_types, start=1)
        ]

    @property
    def parameter_names(self) -> list[str]:
        return [name for name, _ in self.parameters]


@dataclass(frozen=True)
class PartitionPlan:
    """Which functions a side implements and which it reaches through proxies.

    Attributes:
        side: The partition this plan is for
        local: Functions implemented on this side (own label plus neutral)
        remote: Functions owned by the other side, called through proxies
        exported: Local functions the other side may call (own label only)
    """

    side: Side
    local: tuple[FunctionRecord, ...]
    remote: tuple[FunctionRecord, ...]
    exported: tuple[FunctionRecord, ...]

    def is_remote(self, record: FunctionRecord) -> bool:
        return record in self.remote


@dataclass(frozen=True)
class BoundaryCall:
    """A function that can be called across the trust boundary.

    The entry point, proxy, transition routine and EDL prototype for the
    function are all rendered from one of these.
    """

    function: FunctionRecord
    owner: Side

    @property
    def caller(self) -> Side:
        return self.owner.opposite

    @property
    def direction(self) -> str:
        """"ecall" when calling into the enclave, "ocall" when calling out."""
        return "ecall" if self.owner is Side.TRUSTED else "ocall"

    @property
    def simple_name(self) -> str:
        return self.function.simple_name

    @property
    def parameters(self) -> list[tuple[str, str]]:
        return self.function.parameters

    @property
    def return_type(self) -> str:
        return self.function.return_type

    @property
    def returns_value(self) -> bool:
        return self.function.returns_value

    @property
    def entry_name(self) -> str:
        return f"{self.simple_name}_entry"

    @property
    def proxy_name(self) -> str:
        return f"{self.simple_name}_proxy"

    @property
    def transition_name(self) -> str:
        return f"{self.direction}_{self.simple_name}"


@dataclass(frozen=True)
class BoundaryDescriptor:
    """Every cross-partition call signature, ecalls first."""

    ecalls: tuple[BoundaryCall, ...]
    ocalls: tuple[BoundaryCall, ...]

    @property
    def calls(self) -> tuple[BoundaryCall, ...]:
        return self.ecalls + self.ocalls

    def owned_by(self, side: Side) -> tuple[BoundaryCall, ...]:
        """Calls implemented by `side` (their transition routines live there)."""
        return self.ecalls if side is Side.TRUSTED else self.ocalls

    def called_from(self, side: Side) -> tuple[BoundaryCall, ...]:
        """Calls `side` makes into the other partition through proxies."""
        return self.owned_by(side.opposite)


@dataclass
class Artifact:
    """A generated text artifact and the file name it is written under."""

    name: str
    content: str


@dataclass
class EmissionError:
    """A non-fatal error encountered while producing artifacts."""

    artifact: str | None
    error: str
    phase: str  # "loading", "registry", "generation", "emission"


@dataclass
class PartitionResult:
    """Complete result of partitioning a program."""

    source: str
    language: str
    generated_at: str
    written: list[str] = field(default_factory=list)
    errors: list[EmissionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "language": self.language,
            "generated_at": self.generated_at,
            "written": list(self.written),
            "errors": [asdict(e) for e in self.errors],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
