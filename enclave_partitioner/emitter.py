"""Write generated artifacts to the output directory."""

import logging
import os
import tempfile
from pathlib import Path

from enclave_partitioner.models import Artifact

logger = logging.getLogger(__name__)


def _default_file_mode() -> int:
    """Mode a plain open() would create files with under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# Read once at import, before any writer thread runs
DEFAULT_FILE_MODE = _default_file_mode()


class ArtifactSink:
    """Writes each artifact atomically into one directory.

    The content goes to a temporary file beside the destination, which is
    then renamed over it, so a reader never sees a partial artifact and a
    failed write leaves earlier artifacts untouched.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def write(self, artifact: Artifact) -> Path:
        """Write one artifact.

        Returns:
            Path of the written file

        Raises:
            OSError: If the artifact cannot be written
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        destination = self.output_dir / artifact.name

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{artifact.name}.", suffix=".tmp", dir=self.output_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(artifact.content)
            os.chmod(tmp_name, DEFAULT_FILE_MODE)
            os.replace(tmp_name, destination)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Wrote {destination} ({len(artifact.content)} chars)")
        return destination
