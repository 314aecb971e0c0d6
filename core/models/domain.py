# Path: core/models/domain.py
# Purpose: Define domain models shared across storage, discovery, and interface layers.
# Layer: core/models.
# Details: Lightweight dataclasses; BadgeRecord serializes to the camelCase JSON used by the metadata index.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

IMAGE_ENCODING_BINARY = "binary"
IMAGE_ENCODING_BASE64_TEXT = "base64-text"

PRESENTATION_FIELDS = ("badgeType", "badgeTier", "category", "overlayText", "specialIcon")


@dataclass(frozen=True)
class BadgeRecord:
    """Durable record for one discovered species; fields are write-once."""

    id: str
    animal_name: str
    description: str
    image_ref: str
    discovered_at: str
    original_photo_ref: Optional[str] = None
    additional_data: Any = None
    image_encoding: str = IMAGE_ENCODING_BINARY
    badge_type: Optional[str] = None
    badge_tier: Optional[str] = None
    category: Optional[str] = None
    overlay_text: Optional[str] = None
    special_icon: Optional[str] = None

    def matches_name(self, animal_name: str) -> bool:
        """Case-insensitive species comparison used as the deduplication key."""

        return self.animal_name.lower() == animal_name.lower()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "animalName": self.animal_name,
            "description": self.description,
            "imageRef": self.image_ref,
            "discoveredAt": self.discovered_at,
            "imageEncoding": self.image_encoding,
        }
        optional = {
            "originalPhotoRef": self.original_photo_ref,
            "additionalData": self.additional_data,
            "badgeType": self.badge_type,
            "badgeTier": self.badge_tier,
            "category": self.category,
            "overlayText": self.overlay_text,
            "specialIcon": self.special_icon,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BadgeRecord":
        return cls(
            id=str(payload["id"]),
            animal_name=str(payload["animalName"]),
            description=str(payload.get("description") or ""),
            image_ref=str(payload["imageRef"]),
            discovered_at=str(payload["discoveredAt"]),
            original_photo_ref=payload.get("originalPhotoRef"),
            additional_data=payload.get("additionalData"),
            image_encoding=str(payload.get("imageEncoding") or IMAGE_ENCODING_BINARY),
            badge_type=payload.get("badgeType"),
            badge_tier=payload.get("badgeTier"),
            category=payload.get("category"),
            overlay_text=payload.get("overlayText"),
            special_icon=payload.get("specialIcon"),
        )


@dataclass
class IdentificationResult:
    """Name/description pair returned by the identification service."""

    name: str
    description: str


@dataclass
class GeneratedBadge:
    """Image bytes plus an opaque payload returned by the badge generation service."""

    image_bytes: bytes
    extra: Any = None


@dataclass
class BadgeCollection:
    """Snapshot of the whole collection at a point in time."""

    badges: List[BadgeRecord]
    total_count: int
    last_sync: str


@dataclass
class StorageStats:
    """Aggregated blob usage across the collection."""

    total_badges: int
    total_size: int
    last_sync: str


@dataclass
class RepairResult:
    repaired: bool
    message: str
    dropped: int = 0


@dataclass
class CollectionStats:
    """Derived statistics over the current collection."""

    total_badges: int
    unique_species: int
    last_discovery: Optional[str]
    average_discoveries_per_day: float


@dataclass
class CollectionExport:
    badges: List[BadgeRecord]
    stats: CollectionStats
    export_date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "badges": [badge.to_dict() for badge in self.badges],
            "stats": {
                "totalBadges": self.stats.total_badges,
                "uniqueSpecies": self.stats.unique_species,
                "lastDiscovery": self.stats.last_discovery,
                "averageDiscoveriesPerDay": self.stats.average_discoveries_per_day,
            },
            "exportDate": self.export_date,
        }


@dataclass
class HealthReport:
    is_healthy: bool
    message: str
    stats: Optional[StorageStats] = None


class DiscoveryStep(str, Enum):
    IDENTIFY = "identify"
    LOOKUP = "lookup"
    GENERATE = "generate"
    PERSIST = "persist"


@dataclass
class DiscoveryResult:
    """Base for the three terminal outcomes of a discovery run."""

    status = "unknown"


@dataclass
class DiscoverySuccess(DiscoveryResult):
    badge: BadgeRecord
    status = "success"


@dataclass
class AlreadyExists(DiscoveryResult):
    animal_name: str
    existing_badge: BadgeRecord
    status = "already_exists"


@dataclass
class DiscoveryFailure(DiscoveryResult):
    step: DiscoveryStep
    error: Exception
    status = "failure"

    @property
    def message(self) -> str:
        return f"{self.step.value} failed: {self.error}"


@dataclass
class SampleBadge:
    """Seed definition used to populate a demo collection."""

    animal_name: str
    description: str
    presentation: Dict[str, str] = field(default_factory=dict)
