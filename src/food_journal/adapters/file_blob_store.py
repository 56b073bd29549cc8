"""JSON file blob store."""

import os
from dataclasses import dataclass
from pathlib import Path

from food_journal.services.journal import BlobStore


@dataclass
class FileBlobStore(BlobStore):
    """Stores each blob as ``<root>/<key>.json``."""

    root: Path

    def load(self, key: str) -> str | None:
        """Return the file content for ``key``, if the file exists."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, blob: str) -> None:
        """Write the blob through a temporary file and swap it in."""
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(blob, encoding="utf-8")
        os.replace(tmp_path, path)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.root / f"{key}.json"
