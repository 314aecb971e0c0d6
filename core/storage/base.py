# Path: core/storage/base.py
# Purpose: Define the BlobStore interface for durable byte storage keyed by path.
# Layer: core/storage.
# Details: Paths are either absolute or relative to the store root; implementations translate medium errors.

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List


class BlobStore(ABC):
    """Abstract base class for pluggable blob storage backends."""

    root: Path

    @abstractmethod
    def ensure_root(self) -> None:
        """Create the root directory if absent; no error when it already exists."""

    @abstractmethod
    def write(self, path: str | Path, data: bytes) -> str:
        """Write bytes to path and return the stored reference; raises WriteFailure."""

    @abstractmethod
    def write_text(self, path: str | Path, text: str) -> str:
        """Write text to path and return the stored reference; raises WriteFailure."""

    @abstractmethod
    def read(self, path: str | Path) -> bytes:
        """Return the bytes at path; raises NotFound or ReadFailure."""

    @abstractmethod
    def exists(self, path: str | Path) -> bool:
        """Return whether path resolves to a file; never raises."""

    @abstractmethod
    def delete(self, path: str | Path) -> bool:
        """Best-effort delete; return True if the file is gone afterwards."""

    @abstractmethod
    def copy(self, source: str | Path, path: str | Path) -> str:
        """Copy an external file into the store and return the stored reference."""

    @abstractmethod
    def list_children(self, path: str | Path = ".") -> List[str]:
        """Return the names of entries directly under path."""

    @abstractmethod
    def size_of(self, path: str | Path) -> int:
        """Return the file size in bytes, or 0 when it does not exist."""

    @abstractmethod
    def ref_for(self, path: str | Path) -> str:
        """Return the canonical reference string stored in records for path."""
