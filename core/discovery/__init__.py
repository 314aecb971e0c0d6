# Path: core/discovery/__init__.py
# Purpose: Package initializer for the discovery pipeline and its collaborators.
# Layer: core/discovery.
# Details: Exposes collaborator interfaces, HTTP and placeholder implementations, and the BadgeService.

from .base import AnimalIdentifier, BadgeGenerator
from .http_clients import HttpAnimalIdentifier, HttpBadgeGenerator
from .placeholder import PlaceholderBadgeGenerator
from .service import BadgeService

__all__ = [
    "AnimalIdentifier",
    "BadgeGenerator",
    "BadgeService",
    "HttpAnimalIdentifier",
    "HttpBadgeGenerator",
    "PlaceholderBadgeGenerator",
]
