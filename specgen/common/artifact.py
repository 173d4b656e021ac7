"""Specification artifact and the sink that persists it."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from specgen.common.errors import ArtifactWriteFailure

FILENAME_FORMAT = "spec-%Y%m%d-%H%M%S.md"


def _file_mode() -> int:
    """Mode a plain open() would create under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@dataclass(frozen=True)
class SpecificationArtifact:
    body: str
    name: str

    @classmethod
    def create(cls, body: str, now: datetime | None = None) -> "SpecificationArtifact":
        """Name the artifact after the local wall-clock time of synthesis."""
        return cls(body=body, name=(now or datetime.now()).strftime(FILENAME_FORMAT))


class ArtifactWriter:
    """Writes artifacts into *output_dir*, atomically."""

    def __init__(self, output_dir: str | Path = ".", logger: logging.Logger | None = None):
        self.output_dir = Path(output_dir)
        self.log = logger or logging.getLogger(__name__)

    def write(self, artifact: SpecificationArtifact) -> Path:
        """Write the body as UTF-8 and return the final path.

        The content goes to a temp file in the same directory first and is
        renamed into place, so a failed write never leaves a partial file.
        """
        target = self.output_dir / artifact.name
        tmp_path: str | None = None
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.output_dir, prefix=".spec-", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(artifact.body.encode("utf-8"))
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _file_mode())
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise ArtifactWriteFailure(f"{target}: {e.strerror or e}") from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    self.log.debug("Could not remove temp file %s", tmp_path)

        self.log.debug("Wrote %d characters to %s", len(artifact.body), target)
        return target
