# Path: core/discovery/service.py
# Purpose: Orchestrate the discovery pipeline that yields at most one badge per species.
# Layer: core/discovery.
# Details: identify -> lookup -> generate -> persist; every step failure ends in a DiscoveryFailure outcome.

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from config.settings import AppSettings
from core.models.domain import (
    AlreadyExists,
    BadgeCollection,
    BadgeRecord,
    CollectionExport,
    CollectionStats,
    DiscoveryFailure,
    DiscoveryResult,
    DiscoveryStep,
    DiscoverySuccess,
    HealthReport,
    IdentificationResult,
    SampleBadge,
)
from core.storage.badge_storage import BadgeStorage

from .base import AnimalIdentifier, BadgeGenerator, Photo
from .http_clients import HttpAnimalIdentifier, HttpBadgeGenerator
from .placeholder import PlaceholderBadgeGenerator
from .views import collection_stats, export_collection, filter_badges

logger = logging.getLogger(__name__)


class BadgeService:
    """High-level service bridging interfaces with the identifier, generator, and badge storage."""

    def __init__(
        self,
        storage: BadgeStorage,
        identifier: AnimalIdentifier,
        generator: BadgeGenerator,
        stats_window_days: int = 30,
    ) -> None:
        self.storage = storage
        self.identifier = identifier
        self.generator = generator
        self.stats_window_days = stats_window_days
        self._discovery_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "BadgeService":
        """Wire storage and HTTP collaborators; without a generation endpoint badges are rendered locally."""

        generator: BadgeGenerator
        if settings.remote.generate_url:
            generator = HttpBadgeGenerator.from_settings(settings.remote)
        else:
            logger.warning("No generation endpoint configured, using placeholder badges")
            generator = PlaceholderBadgeGenerator()
        return cls(
            storage=BadgeStorage.from_settings(settings.storage),
            identifier=HttpAnimalIdentifier.from_settings(settings.remote),
            generator=generator,
            stats_window_days=settings.stats_window_days,
        )

    def discover_animal(self, photo: Photo) -> DiscoveryResult:
        """
        Run the full pipeline for one photo.

        External calls:
        - core/discovery/base.py::AnimalIdentifier.identify - names the animal in the photo.
        - core/storage/badge_storage.py::BadgeStorage.get_badge_by_animal_name - deduplication lookup.
        - core/discovery/base.py::BadgeGenerator.generate - only for species not yet collected.
        - core/storage/badge_storage.py::BadgeStorage.save_badge - persists the new badge.
        """

        logger.info("Step 1: identifying animal")
        try:
            identification = self.identifier.identify(photo)
        except Exception as exc:  # noqa: BLE001 - reported as a failure outcome
            logger.warning("Identification failed: %s", exc)
            return DiscoveryFailure(step=DiscoveryStep.IDENTIFY, error=exc)

        logger.info("Identified %s", identification.name)
        return self._discover_identified(identification, original_photo=photo)

    def _discover_identified(
        self,
        identification: IdentificationResult,
        original_photo: Optional[Photo] = None,
        presentation: Optional[Dict[str, str]] = None,
    ) -> DiscoveryResult:
        # Lookup through persist runs under one lock so a species cannot be saved twice.
        with self._discovery_lock:
            logger.info("Step 2: checking whether %s is already collected", identification.name)
            try:
                existing = self.storage.get_badge_by_animal_name(identification.name)
            except Exception as exc:  # noqa: BLE001 - reported as a failure outcome
                return DiscoveryFailure(step=DiscoveryStep.LOOKUP, error=exc)

            if existing is not None:
                logger.info("%s already collected as badge %s", identification.name, existing.id)
                return AlreadyExists(animal_name=identification.name, existing_badge=existing)

            logger.info("Step 3: generating badge for %s", identification.name)
            try:
                generated = self.generator.generate(identification.name)
            except Exception as exc:  # noqa: BLE001 - reported as a failure outcome
                logger.warning("Badge generation failed for %s: %s", identification.name, exc)
                return DiscoveryFailure(step=DiscoveryStep.GENERATE, error=exc)

            logger.info("Step 4: saving badge for %s", identification.name)
            try:
                badge = self.storage.save_badge(
                    identification.name,
                    identification.description,
                    generated.image_bytes,
                    original_photo=original_photo,
                    additional_data=generated.extra,
                    presentation=presentation,
                )
            except Exception as exc:  # noqa: BLE001 - reported as a failure outcome
                logger.error("Saving badge for %s failed: %s", identification.name, exc)
                return DiscoveryFailure(step=DiscoveryStep.PERSIST, error=exc)

        return DiscoverySuccess(badge=badge)

    def simulate_discovery(
        self,
        animal_name: str,
        description: str,
        presentation: Optional[Dict[str, str]] = None,
    ) -> DiscoveryResult:
        """Run the pipeline from the lookup step with a supplied identification."""

        identification = IdentificationResult(name=animal_name, description=description)
        return self._discover_identified(identification, presentation=presentation)

    def generate_sample_badges(self, samples: Iterable[SampleBadge]) -> List[BadgeRecord]:
        """Seed demo badges, skipping species that are already collected."""

        created: List[BadgeRecord] = []
        for sample in samples:
            result = self.simulate_discovery(sample.animal_name, sample.description, presentation=sample.presentation)
            if isinstance(result, DiscoverySuccess):
                created.append(result.badge)
            elif isinstance(result, DiscoveryFailure):
                logger.error("Could not create sample badge %s: %s", sample.animal_name, result.message)
        return created

    # Read-only views
    def get_all_badges(self) -> List[BadgeRecord]:
        return self.storage.get_all_badges()

    def get_badge_by_id(self, badge_id: str) -> Optional[BadgeRecord]:
        return self.storage.get_badge_by_id(badge_id)

    def check_if_animal_exists(self, animal_name: str) -> bool:
        return self.storage.check_if_animal_exists(animal_name)

    def get_badge_collection(self) -> BadgeCollection:
        return self.storage.get_badge_collection()

    def get_collection_stats(self, now: Optional[datetime] = None) -> CollectionStats:
        return collection_stats(self.get_all_badges(), window_days=self.stats_window_days, now=now)

    def get_filtered_badges(
        self,
        search: Optional[str] = None,
        sort_by: str = "date",
        sort_order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[BadgeRecord]:
        return filter_badges(self.get_all_badges(), search=search, sort_by=sort_by, sort_order=sort_order, limit=limit)

    def export_collection(self, now: Optional[datetime] = None) -> CollectionExport:
        badges = self.get_all_badges()
        logger.info("Exporting collection of %d badges", len(badges))
        return export_collection(badges, window_days=self.stats_window_days, now=now)

    # Mutations delegated to storage
    def delete_badge(self, badge_id: str) -> bool:
        return self.storage.delete_badge(badge_id)

    def clear_all_badges(self) -> bool:
        return self.storage.clear_all_badges()

    # Health
    def check_api_connection(self) -> bool:
        connected = self.identifier.check_connection()
        logger.info("API connection: %s", "ok" if connected else "unavailable")
        return connected

    def check_storage_health(self) -> HealthReport:
        """Integrity round-trip, then repair, then stats; a repair means the store was unhealthy."""

        if not self.storage.test_integrity():
            return HealthReport(is_healthy=False, message="Storage integrity check failed")

        repair = self.storage.repair()
        if repair.repaired:
            return HealthReport(is_healthy=False, message=repair.message)

        return HealthReport(is_healthy=True, message="Storage is healthy", stats=self.storage.get_storage_stats())
