"""FileStore — the default store: one JSON file per key in a local directory.

Why plain files as the default:
- Zero setup: the directory is created on first write.
- Human-readable: ``.catrisk/catrisk_history.json`` can be inspected or
  backed up with ordinary tools.
- Atomic replace: each write goes to a temp file that is renamed over the
  old one, so an interrupted write never leaves a half-written history.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from catrisk_store.base import BaseStore

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileStore(BaseStore):
    """Stores each key as ``<directory>/<key>.json``.

    The directory defaults to ``.catrisk`` in the current working
    directory. Configure via .catrisk.yml: ``store_path: /path/to/dir``.
    """

    def __init__(self, directory: str = ".catrisk"):
        self._dir = Path(directory)

    def _path(self, key: str) -> Path:
        return self._dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=self._dir, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug("Wrote %d bytes to %s", len(value), path)
