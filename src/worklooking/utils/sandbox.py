"""Filesystem access confined to the user data directory.

Relative paths are joined to the sandbox root and must stay inside it after
normalization. Absolute paths are trusted (they come from the user, e.g. a
picked file) and are returned unchanged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from worklooking.errors import FileNotFound, InvalidPath, WriteFailed

logger = logging.getLogger(__name__)


def resolve_path(path: str | Path, root: str | Path) -> Path:
    """Resolve ``path`` against ``root``, refusing traversal outside of it.

    Raises InvalidPath for an empty path or a relative path escaping ``root``.
    """
    raw = str(path) if path is not None else ""
    if not raw.strip():
        raise InvalidPath("Path is required")

    if os.path.isabs(raw):
        return Path(raw)

    root_path = Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(root)))))
    candidate = Path(os.path.normpath(os.path.join(root_path, raw)))
    if not candidate.is_relative_to(root_path):
        raise InvalidPath(f"Path traversal not allowed: {raw}")
    return candidate


class SandboxedFileAccessor:
    """Reads and writes files relative to a fixed root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(root)))))

    def with_root(self, new_root: str | Path) -> SandboxedFileAccessor:
        """Return an accessor on ``new_root``, which must be an existing directory."""
        if not Path(new_root).expanduser().is_dir():
            raise InvalidPath(f"Path does not exist: {new_root}")
        return SandboxedFileAccessor(new_root)

    def resolve(self, path: str | Path) -> Path:
        return resolve_path(path, self.root)

    def exists(self, path: str | Path) -> bool:
        return self.resolve(path).exists()

    def read_text(self, path: str | Path) -> str:
        full_path = self.resolve(path)
        if not full_path.is_file():
            raise FileNotFound(f"File not found: {path}")
        return full_path.read_text(encoding="utf-8")

    def write_text(self, path: str | Path, content: str) -> Path:
        return self._write(path, content.encode("utf-8"))

    def write_bytes(self, path: str | Path, data: bytes) -> Path:
        return self._write(path, data)

    def _write(self, path: str | Path, data: bytes) -> Path:
        full_path = self.resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as exc:
            raise WriteFailed(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(data), full_path)
        return full_path
