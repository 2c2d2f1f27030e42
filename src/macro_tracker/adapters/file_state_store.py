"""Key-value byte store backed by files in a local directory."""

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from macro_tracker.services.tracker import StateStore

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class FileStateStore(StateStore):
    """Stores each key as one file; writes replace the file atomically."""

    directory: Path

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes for a key, if present."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        """Overwrite the value for a key."""
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(value)
            Path(tmp_name).replace(path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"
