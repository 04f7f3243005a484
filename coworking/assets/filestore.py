"""Filesystem storage for office image bytes.

Layout (gitignored):
  data/storage/<relative path>      e.g. data/storage/offices/3f2a....jpg

Paths handed to `FileStorage` are always relative to its root; anything that
resolves outside the root is rejected.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path, PurePosixPath


class StorageError(Exception):
    pass


def _normalize_relative_path(value: str) -> str:
    raw = (value or "").strip().replace("\\", "/")
    if not raw:
        raise StorageError("storage path must not be empty")
    rel = PurePosixPath(raw)
    if rel.is_absolute() or any(part in ("..", "") for part in rel.parts):
        raise StorageError(f"storage path must be relative and inside the root (got {value!r})")
    return rel.as_posix()


class FileStorage:
    """Synchronous local-disk storage addressed by relative path."""

    def __init__(self, root_dir: str | Path = "data/storage"):
        self.root_dir = Path(root_dir)

    def path_for(self, path: str) -> Path:
        return self.root_dir / _normalize_relative_path(path)

    def exists(self, path: str) -> bool:
        return self.path_for(path).is_file()

    def get_bytes(self, path: str) -> bytes:
        return self.path_for(path).read_bytes()

    def put_bytes(self, path: str, data: bytes) -> Path:
        """Write bytes under `path` using an atomic rename."""
        dest = self.path_for(path)
        dest.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f"{dest.name}.tmp.",
                dir=str(dest.parent),
            )
            with os.fdopen(fd, "wb") as f:
                fd = None
                f.write(data or b"")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, dest)
            tmp_path = None
        finally:
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

        return dest

    def delete(self, path: str) -> bool:
        """Remove the file at `path`. Returns False if nothing was there."""
        target = self.path_for(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True


def get_storage() -> FileStorage:
    """FastAPI dependency returning storage rooted at the configured directory."""
    from ..config import settings

    return FileStorage(settings.storage_path)
