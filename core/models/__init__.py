# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes dataclasses used across storage, discovery, and interface layers.

from .domain import (
    AlreadyExists,
    BadgeCollection,
    BadgeRecord,
    CollectionExport,
    CollectionStats,
    DiscoveryFailure,
    DiscoveryResult,
    DiscoveryStep,
    DiscoverySuccess,
    GeneratedBadge,
    HealthReport,
    IdentificationResult,
    RepairResult,
    SampleBadge,
    StorageStats,
)

__all__ = [
    "AlreadyExists",
    "BadgeCollection",
    "BadgeRecord",
    "CollectionExport",
    "CollectionStats",
    "DiscoveryFailure",
    "DiscoveryResult",
    "DiscoveryStep",
    "DiscoverySuccess",
    "GeneratedBadge",
    "HealthReport",
    "IdentificationResult",
    "RepairResult",
    "SampleBadge",
    "StorageStats",
]
