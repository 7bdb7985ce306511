"""Configuration for a partitioning run."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from enclave_partitioner.models import GuestLanguage, Side

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "polytaint"
DEFAULT_EDL_NAME = "Enclave.edl"


@dataclass(frozen=True)
class PartitionerConfig:
    """Options shared by every generator in one run.

    Attributes:
        language: Guest language of the input program
        output_dir: Directory the artifacts are written to
        package: Java package of the generated partition classes
        edl_name: File name of the boundary descriptor
    """

    language: GuestLanguage = GuestLanguage.JS
    output_dir: Path = field(default_factory=lambda: Path("generated"))
    package: str = DEFAULT_PACKAGE
    edl_name: str = DEFAULT_EDL_NAME

    def qualified_class(self, side: Side) -> str:
        """Fully qualified Java class of a partition: "polytaint.Trusted"."""
        return f"{self.package}.{side.class_name}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PartitionerConfig":
        """Create from dictionary.

        Raises:
            ValueError: If a field is unknown or invalid
        """
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a dictionary, got {type(data).__name__}")

        known_fields = {"language", "output_dir", "package", "edl_name"}
        unknown = set(data) - known_fields
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")

        kwargs = dict(data)
        if "language" in kwargs:
            try:
                kwargs["language"] = GuestLanguage(kwargs["language"])
            except ValueError as e:
                raise ValueError(f"Unsupported language: {kwargs['language']}") from e
        if "output_dir" in kwargs:
            kwargs["output_dir"] = Path(kwargs["output_dir"])
        if "package" in kwargs and not str(kwargs["package"]).strip():
            raise ValueError("Config 'package' must not be empty")

        config = cls(**kwargs)
        logger.debug(f"Loaded config: {config}")
        return config
