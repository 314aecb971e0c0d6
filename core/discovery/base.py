# Path: core/discovery/base.py
# Purpose: Define the collaborator interfaces consumed by the discovery pipeline.
# Layer: core/discovery.
# Details: Identification maps a photo to a name/description; generation maps a name to badge image bytes.

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from core.models.domain import GeneratedBadge, IdentificationResult

Photo = Union[Path, str, bytes]


class AnimalIdentifier(ABC):
    """Abstract base class for animal identification services."""

    name: str

    @abstractmethod
    def identify(self, photo: Photo) -> IdentificationResult:
        """Identify the animal in a photo; raises RemoteFailure on any service error."""

    def check_connection(self) -> bool:
        """Return whether the service looks reachable."""

        return True


class BadgeGenerator(ABC):
    """Abstract base class for badge image generation services."""

    name: str

    @abstractmethod
    def generate(self, animal_name: str) -> GeneratedBadge:
        """Return badge image bytes for a species; raises RemoteFailure on any service error."""
