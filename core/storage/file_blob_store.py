# Path: core/storage/file_blob_store.py
# Purpose: Provide a filesystem-backed BlobStore.
# Layer: core/storage.
# Details: Thin wrapper over pathlib; OSErrors are translated into the storage error taxonomy.

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

from core.errors import NotFound, ReadFailure, UnsafePath, WriteFailure

from .base import BlobStore

logger = logging.getLogger(__name__)


class FileBlobStore(BlobStore):
    """Store blobs as plain files under a dedicated root directory; paths escaping the root are refused."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def _resolve(self, path: str | Path) -> Path:
        """Map a relative name or a stored reference to a file that must live under root."""

        candidate = Path(path)
        target = candidate if candidate.is_absolute() else self.root / candidate
        resolved = target.resolve()
        root = self.root.resolve()
        if resolved != root and root not in resolved.parents:
            raise UnsafePath(f"{path} is outside the blob root {root}")
        return resolved

    def ref_for(self, path: str | Path) -> str:
        return self._resolve(path).as_posix()

    def ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteFailure(f"Could not create blob root {self.root}: {exc}") from exc

    def write(self, path: str | Path, data: bytes) -> str:
        target = self._resolve(path)
        try:
            target.write_bytes(data)
        except (OSError, TypeError) as exc:
            raise WriteFailure(f"Could not write {target}: {exc}") from exc
        return self.ref_for(target)

    def write_text(self, path: str | Path, text: str) -> str:
        target = self._resolve(path)
        try:
            target.write_text(text, encoding="utf-8")
        except (OSError, UnicodeError) as exc:
            raise WriteFailure(f"Could not write {target}: {exc}") from exc
        return self.ref_for(target)

    def read(self, path: str | Path) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise NotFound(f"No blob at {target}")
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise NotFound(f"No blob at {target}") from exc
        except OSError as exc:
            raise ReadFailure(f"Could not read {target}: {exc}") from exc

    def exists(self, path: str | Path) -> bool:
        try:
            return self._resolve(path).is_file()
        except (UnsafePath, OSError, ValueError, TypeError):
            return False

    def delete(self, path: str | Path) -> bool:
        try:
            target = self._resolve(path)
        except UnsafePath as exc:
            logger.warning("Refusing to delete %s", exc)
            return False
        try:
            target.unlink()
        except FileNotFoundError:
            return True
        except OSError as exc:
            logger.warning("Could not delete blob %s: %s", target, exc)
            return False
        return True

    def copy(self, source: str | Path, path: str | Path) -> str:
        target = self._resolve(path)
        source_path = Path(source)
        if not source_path.is_file():
            raise NotFound(f"No file to copy at {source_path}")
        try:
            shutil.copyfile(source_path, target)
        except OSError as exc:
            raise WriteFailure(f"Could not copy {source_path} to {target}: {exc}") from exc
        return self.ref_for(target)

    def list_children(self, path: str | Path = ".") -> List[str]:
        directory = self._resolve(path)
        try:
            return sorted(entry.name for entry in directory.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise ReadFailure(f"Could not list {directory}: {exc}") from exc

    def size_of(self, path: str | Path) -> int:
        try:
            return self._resolve(path).stat().st_size
        except (UnsafePath, OSError, ValueError, TypeError):
            return 0
