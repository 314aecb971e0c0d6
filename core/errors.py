# Path: core/errors.py
# Purpose: Define the error taxonomy shared by storage and discovery layers.
# Layer: core.
# Details: Local I/O errors derive from StorageError; remote collaborator errors carry a failure kind.

from __future__ import annotations

from enum import Enum


class AnimalDexError(Exception):
    """Base class for all errors raised by the badge collection core."""


class StorageError(AnimalDexError):
    """Base class for local storage failures."""


class NotFound(StorageError):
    """A referenced blob or record does not exist."""


class EncodingFailure(StorageError):
    """Binary or base64 payload is malformed."""


class WriteFailure(StorageError):
    """The underlying medium rejected a write."""


class ReadFailure(StorageError):
    """The underlying medium failed to read an existing file."""


class UnsafePath(StorageError):
    """A path resolves outside the blob store root."""


class RemoteFailureKind(str, Enum):
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    MALFORMED_RESPONSE = "malformed_response"


class RemoteFailure(AnimalDexError):
    """Failure reported by the identification or badge generation service."""

    def __init__(self, kind: RemoteFailureKind, message: str, service: str = "") -> None:
        super().__init__(message)
        self.kind = kind
        self.service = service

    @property
    def retryable(self) -> bool:
        return self.kind in (RemoteFailureKind.TIMEOUT, RemoteFailureKind.SERVER_ERROR)

    def __str__(self) -> str:
        prefix = f"[{self.service}] " if self.service else ""
        return f"{prefix}{self.kind.value}: {self.args[0]}"


__all__ = [
    "AnimalDexError",
    "StorageError",
    "NotFound",
    "EncodingFailure",
    "WriteFailure",
    "ReadFailure",
    "UnsafePath",
    "RemoteFailureKind",
    "RemoteFailure",
]
