# Path: core/storage/badge_storage.py
# Purpose: Compose blob storage and the metadata index into badge-level operations.
# Layer: core/storage.
# Details: Sole writer of the badge root; save, lookup, delete, bulk clear, integrity check, repair, and stats.

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from config.settings import StorageSettings
from core.errors import EncodingFailure, NotFound, StorageError, WriteFailure
from core.models.domain import (
    IMAGE_ENCODING_BASE64_TEXT,
    IMAGE_ENCODING_BINARY,
    BadgeCollection,
    BadgeRecord,
    RepairResult,
    StorageStats,
)

from .base import BlobStore
from .encoding import decode_base64, encode_image
from .file_blob_store import FileBlobStore
from .metadata_index import IndexStatus, MetadataIndex

logger = logging.getLogger(__name__)

OriginalPhoto = Union[Path, str, bytes, bytearray]

_PRESENTATION_KEYS = {
    "badgeType": "badge_type",
    "badgeTier": "badge_tier",
    "category": "category",
    "overlayText": "overlay_text",
    "specialIcon": "special_icon",
}

_INTEGRITY_PAYLOAD = b"test_data"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def new_badge_id() -> str:
    return uuid.uuid4().hex


class BadgeStorage:
    """Record store for the badge collection.

    Responsibilities:
    - Write badge image blobs and index their metadata.
    - Answer lookups by id and case-insensitive animal name.
    - Keep blobs and index entries together on delete and bulk clear.
    - Restore the blob-existence invariant through repair().

    It does not reject duplicate species on insert; callers check first.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        settings: Optional[StorageSettings] = None,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = new_badge_id,
    ) -> None:
        self.blob_store = blob_store
        self.settings = settings or StorageSettings(root=blob_store.root)
        self.index = MetadataIndex(blob_store, self.settings.metadata_filename)
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "BadgeStorage":
        return cls(FileBlobStore(settings.root), settings=settings)

    def ensure_root(self) -> None:
        self.blob_store.ensure_root()

    # Save path
    def save_badge(
        self,
        animal_name: str,
        description: str,
        image_bytes: bytes,
        original_photo: Optional[OriginalPhoto] = None,
        additional_data: Any = None,
        presentation: Optional[Mapping[str, str]] = None,
    ) -> BadgeRecord:
        """Persist a new badge image and append its record to the index.

        The caller must already have confirmed that no badge shares ``animal_name``.
        A failed blob write never produces an index entry; a failed index write
        leaves an orphaned blob for repair() to ignore.
        """

        logger.info("Saving badge for %s", animal_name)
        encoded = encode_image(image_bytes)

        with self._lock:
            self.ensure_root()
            badge_id = self._id_factory()
            image_name = f"{self.settings.image_prefix}{badge_id}{self.settings.image_suffix}"

            try:
                image_ref, image_encoding = self._write_encoded(image_name, encoded)
            except WriteFailure:
                logger.error("Could not write image blob for %s", animal_name)
                raise

            original_ref = None
            if original_photo is not None:
                original_ref = self._store_original(badge_id, original_photo)

            fields = self._presentation_fields(additional_data, presentation)
            record = BadgeRecord(
                id=badge_id,
                animal_name=animal_name,
                description=description,
                image_ref=image_ref,
                discovered_at=self._clock(),
                original_photo_ref=original_ref,
                additional_data=additional_data,
                image_encoding=image_encoding,
                **fields,
            )

            try:
                self.index.append_one(record)
            except StorageError:
                logger.error("Badge %s image stored but metadata write failed; blob %s is orphaned", badge_id, image_ref)
                raise

        logger.info("Badge %s saved for %s", record.id, animal_name)
        return record

    def _write_encoded(self, name: str, encoded: str) -> Tuple[str, str]:
        """Write base64 data as binary, falling back to storing the base64 text itself."""

        data = decode_base64(encoded)
        try:
            return self.blob_store.write(name, data), IMAGE_ENCODING_BINARY
        except WriteFailure as exc:
            logger.warning("Binary write of %s failed, using plain-text fallback: %s", name, exc)

        try:
            ref = self.blob_store.write_text(name, encoded)
        except WriteFailure as exc:
            raise WriteFailure(f"Could not write {name} in either encoding") from exc
        logger.warning("Blob %s stored as base64 text (degraded)", name)
        return ref, IMAGE_ENCODING_BASE64_TEXT

    def _store_original(self, badge_id: str, original: OriginalPhoto) -> Optional[str]:
        """Store the user's source photo; failures are logged and the badge is kept without it."""

        name = f"{self.settings.original_prefix}{badge_id}{self.settings.original_suffix}"
        try:
            if isinstance(original, (bytes, bytearray)):
                return self.blob_store.write(name, bytes(original))

            source = _as_local_file(original)
            if source is not None:
                return self.blob_store.copy(source, name)

            if isinstance(original, str):
                payload = original.split(",", 1)[1] if original.startswith("data:") else original
                return self._write_encoded(name, payload)[0]

            raise EncodingFailure(f"Unsupported original photo type {type(original).__name__}")
        except StorageError as exc:
            logger.warning("Could not store original photo for badge %s: %s", badge_id, exc)
            return None

    @staticmethod
    def _presentation_fields(additional_data: Any, presentation: Optional[Mapping[str, str]]) -> Dict[str, Optional[str]]:
        source: Dict[str, Any] = {}
        if isinstance(additional_data, Mapping):
            source.update(additional_data)
        if presentation:
            source.update(presentation)

        fields: Dict[str, Optional[str]] = {}
        for key, attr in _PRESENTATION_KEYS.items():
            value = source.get(key)
            if value is not None:
                fields[attr] = str(value)
        return fields

    # Reads
    def get_all_badges(self) -> List[BadgeRecord]:
        try:
            return self.index.load_all()
        except (StorageError, OSError) as exc:
            logger.error("Could not load badges: %s", exc)
            return []

    def get_badge_by_id(self, badge_id: str) -> Optional[BadgeRecord]:
        return next((badge for badge in self.get_all_badges() if badge.id == badge_id), None)

    def get_badge_by_animal_name(self, animal_name: str) -> Optional[BadgeRecord]:
        """Return the first badge whose species matches case-insensitively."""

        return next((badge for badge in self.get_all_badges() if badge.matches_name(animal_name)), None)

    def check_if_animal_exists(self, animal_name: str) -> bool:
        return self.get_badge_by_animal_name(animal_name) is not None

    def get_badge_collection(self) -> BadgeCollection:
        badges = self.get_all_badges()
        return BadgeCollection(badges=badges, total_count=len(badges), last_sync=utc_now_iso())

    def get_badge_image_ref(self, badge: BadgeRecord) -> Optional[str]:
        """Return the image reference only if its blob exists."""

        if not self.blob_store.exists(badge.image_ref):
            logger.warning("Image blob missing for badge %s: %s", badge.id, badge.image_ref)
            return None
        return badge.image_ref

    def read_badge_image(self, badge: BadgeRecord | str) -> bytes:
        """Return the badge image bytes, decoding blobs stored through the text fallback."""

        if isinstance(badge, str):
            found = self.get_badge_by_id(badge)
            if found is None:
                raise NotFound(f"No badge with id {badge}")
            badge = found

        data = self.blob_store.read(badge.image_ref)
        if badge.image_encoding == IMAGE_ENCODING_BASE64_TEXT:
            return decode_base64(data)
        return data

    # Mutations
    def delete_badge(self, badge_id: str) -> bool:
        """Remove a badge's blobs and index entry; True only if the index update succeeded."""

        with self._lock:
            badges = self.get_all_badges()
            target = next((badge for badge in badges if badge.id == badge_id), None)
            if target is None:
                logger.warning("Cannot delete badge %s: not found", badge_id)
                return False

            if not self.blob_store.delete(target.image_ref):
                logger.warning("Image blob for badge %s was not removed", badge_id)
            if target.original_photo_ref and not self.blob_store.delete(target.original_photo_ref):
                logger.warning("Original photo for badge %s was not removed", badge_id)

            remaining = [badge for badge in badges if badge.id != badge_id]
            try:
                self.index.save_all(remaining)
            except StorageError as exc:
                logger.error("Could not update metadata after deleting %s: %s", badge_id, exc)
                return False

        logger.info("Badge %s deleted", badge_id)
        return True

    def clear_all_badges(self) -> bool:
        """Delete every file under the root, index included; one failure never stops the sweep."""

        with self._lock:
            try:
                self.ensure_root()
                names = self.blob_store.list_children()
            except StorageError as exc:
                logger.error("Could not clear badges: %s", exc)
                return False

            failures = [name for name in names if not self.blob_store.delete(name)]
            for name in failures:
                logger.warning("Could not delete %s while clearing badges", name)

            cleared = not self.index.exists()

        logger.info("Cleared badge storage: %d removed, %d failed", len(names) - len(failures), len(failures))
        return cleared

    # Health
    def test_integrity(self) -> bool:
        """Round-trip a small payload through the blob store."""

        check_name = self.settings.integrity_file_name
        try:
            self.ensure_root()
            self.blob_store.write(check_name, _INTEGRITY_PAYLOAD)
            retrieved = self.blob_store.read(check_name)
        except StorageError as exc:
            logger.error("Storage integrity check failed: %s", exc)
            return False
        finally:
            self.blob_store.delete(check_name)
        return retrieved == _INTEGRITY_PAYLOAD

    def repair(self) -> RepairResult:
        """Drop a corrupt index, malformed entries, and entries whose image blob no longer exists."""

        with self._lock:
            try:
                self.ensure_root()
            except StorageError as exc:
                logger.error("Repair could not access storage: %s", exc)
                return RepairResult(repaired=False, message=f"Error while repairing storage: {exc}")

            if not self.index.exists():
                return RepairResult(repaired=False, message="No data to repair")

            snapshot = self.index.load()
            if snapshot.status is IndexStatus.CORRUPT:
                logger.warning("Removing corrupt metadata file %s", self.index.ref)
                if not self.index.delete_document():
                    return RepairResult(repaired=False, message="Could not remove corrupt metadata file")
                return RepairResult(repaired=True, message="Removed corrupt metadata file")

            valid: List[BadgeRecord] = []
            for badge in snapshot.records:
                if self.blob_store.exists(badge.image_ref):
                    valid.append(badge)
                else:
                    logger.warning("Dropping badge %s: image blob %s is missing", badge.id, badge.image_ref)

            dropped = len(snapshot.records) - len(valid) + snapshot.skipped
            if dropped == 0:
                return RepairResult(repaired=False, message="Storage is healthy")

            try:
                self.index.save_all(valid)
            except StorageError as exc:
                logger.error("Could not save repaired metadata: %s", exc)
                return RepairResult(repaired=False, message=f"Could not save repaired metadata: {exc}")

        logger.info("Repaired metadata, %d broken badges removed", dropped)
        return RepairResult(
            repaired=True,
            message=f"Repaired metadata: {dropped} broken badges removed",
            dropped=dropped,
        )

    def get_storage_stats(self) -> StorageStats:
        badges = self.get_all_badges()
        total_size = 0
        for badge in badges:
            try:
                size = self.blob_store.size_of(badge.image_ref)
                if badge.original_photo_ref:
                    size += self.blob_store.size_of(badge.original_photo_ref)
            except (StorageError, OSError) as exc:
                logger.warning("Could not size blobs for badge %s: %s", badge.id, exc)
                continue
            total_size += size
        return StorageStats(total_badges=len(badges), total_size=total_size, last_sync=utc_now_iso())


def _as_local_file(original: OriginalPhoto) -> Optional[Path]:
    """Return a filesystem path when the original photo refers to an existing file."""

    if isinstance(original, Path):
        return original
    if not isinstance(original, str):
        return None
    candidate = original[len("file://"):] if original.startswith("file://") else original
    try:
        path = Path(candidate)
        return path if path.is_file() else None
    except (OSError, ValueError):
        return None
