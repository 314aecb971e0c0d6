# Path: tests/conftest.py
# Purpose: Shared pytest fixtures for storage, discovery, and API tests.
# Layer: tests.
# Details: Storage lives under tmp_path; collaborators are in-process fakes that count their calls.

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import pytest

from config.settings import ENV_PREFIX, StorageSettings
from core.discovery.base import AnimalIdentifier, BadgeGenerator, Photo
from core.discovery.service import BadgeService
from core.errors import WriteFailure
from core.models.domain import GeneratedBadge, IdentificationResult
from core.storage.badge_storage import BadgeStorage
from core.storage.file_blob_store import FileBlobStore

BADGE_IMAGE = bytes(range(256)) * 4


class FlakyBlobStore(FileBlobStore):
    """FileBlobStore whose writes can be made to fail for names with a given prefix.

    Each table maps a filename prefix to the number of failures left; -1 fails forever.
    """

    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.write_failures: Dict[str, int] = {}
        self.text_failures: Dict[str, int] = {}

    @staticmethod
    def _should_fail(table: Dict[str, int], path) -> bool:
        name = Path(path).name
        for prefix, remaining in table.items():
            if name.startswith(prefix) and remaining != 0:
                if remaining > 0:
                    table[prefix] = remaining - 1
                return True
        return False

    def write(self, path, data):
        if self._should_fail(self.write_failures, path):
            raise WriteFailure(f"simulated binary write failure for {path}")
        return super().write(path, data)

    def write_text(self, path, text):
        if self._should_fail(self.text_failures, path):
            raise WriteFailure(f"simulated text write failure for {path}")
        return super().write_text(path, text)


class FakeIdentifier(AnimalIdentifier):
    name = "fake-identify"

    def __init__(self, animal_name: str = "Lion", description: str = "King of the jungle") -> None:
        self.animal_name = animal_name
        self.description = description
        self.error: Optional[Exception] = None
        self.connected = True
        self.calls = 0

    def identify(self, photo: Photo) -> IdentificationResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return IdentificationResult(name=self.animal_name, description=self.description)

    def check_connection(self) -> bool:
        return self.connected


class FakeGenerator(BadgeGenerator):
    """Returns fixed badge bytes; a configured error is raised on the next call only."""

    name = "fake-generate"

    def __init__(self, image_bytes: bytes = BADGE_IMAGE, extra=None) -> None:
        self.image_bytes = image_bytes
        self.extra = extra
        self.error: Optional[Exception] = None
        self.calls = 0

    def generate(self, animal_name: str) -> GeneratedBadge:
        self.calls += 1
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        return GeneratedBadge(image_bytes=self.image_bytes, extra=self.extra)


@pytest.fixture
def badge_image() -> bytes:
    return BADGE_IMAGE


@pytest.fixture
def storage_settings(tmp_path: Path) -> StorageSettings:
    return StorageSettings(root=tmp_path / "badges")


@pytest.fixture
def blob_store(storage_settings: StorageSettings) -> FlakyBlobStore:
    return FlakyBlobStore(storage_settings.root)


@pytest.fixture
def storage(blob_store: FlakyBlobStore, storage_settings: StorageSettings) -> BadgeStorage:
    return BadgeStorage(blob_store, settings=storage_settings)


@pytest.fixture
def identifier() -> FakeIdentifier:
    return FakeIdentifier()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def service(storage: BadgeStorage, identifier: FakeIdentifier, generator: FakeGenerator) -> BadgeService:
    return BadgeService(storage=storage, identifier=identifier, generator=generator)


@pytest.fixture
def clean_env():
    """Remove ANIMALDEX_* variables before and after a test, including ones loaded from .env files."""

    def _purge() -> None:
        for key in [key for key in os.environ if key.startswith(ENV_PREFIX)]:
            del os.environ[key]

    _purge()
    yield
    _purge()
