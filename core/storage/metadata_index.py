# Path: core/storage/metadata_index.py
# Purpose: Persist the ordered catalog of badge records as a single JSON document.
# Layer: core/storage.
# Details: Loads are schema-validated with pydantic; a corrupt document reads as an empty collection.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from core.errors import NotFound, StorageError, WriteFailure
from core.models.domain import BadgeRecord

from .base import BlobStore

logger = logging.getLogger(__name__)


class _BadgeEntry(BaseModel):
    """Minimal shape every stored badge must satisfy; other keys pass through."""

    model_config = ConfigDict(extra="allow")

    id: str
    animalName: str
    description: Optional[str] = ""
    imageRef: str
    discoveredAt: str
    originalPhotoRef: Optional[str] = None
    additionalData: Any = None
    imageEncoding: Optional[str] = None


_DOCUMENT_SCHEMA = TypeAdapter(List[Any])


class IndexStatus(str, Enum):
    MISSING = "missing"
    OK = "ok"
    CORRUPT = "corrupt"


@dataclass
class IndexSnapshot:
    """Result of loading the index along with how healthy the document was."""

    status: IndexStatus
    records: List[BadgeRecord] = field(default_factory=list)
    detail: str = ""
    skipped: int = 0


class MetadataIndex:
    """Single-document catalog; every mutation is load-modify-save_all."""

    def __init__(self, blob_store: BlobStore, filename: str = "metadata.json") -> None:
        self.blob_store = blob_store
        self.filename = filename

    @property
    def ref(self) -> str:
        return self.blob_store.ref_for(self.filename)

    def exists(self) -> bool:
        return self.blob_store.exists(self.filename)

    def load(self) -> IndexSnapshot:
        """Read and validate the document, reporting missing or corrupt state instead of raising."""

        try:
            raw = self.blob_store.read(self.filename)
        except NotFound:
            return IndexSnapshot(status=IndexStatus.MISSING)
        except StorageError as exc:
            logger.warning("Metadata index unreadable: %s", exc)
            return IndexSnapshot(status=IndexStatus.CORRUPT, detail=str(exc))

        try:
            entries = _DOCUMENT_SCHEMA.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Metadata index is not a JSON array: %s", exc.errors()[0]["msg"])
            return IndexSnapshot(status=IndexStatus.CORRUPT, detail=str(exc))

        # One malformed entry must not hide the rest of the collection.
        records: List[BadgeRecord] = []
        skipped = 0
        for position, entry in enumerate(entries):
            try:
                records.append(BadgeRecord.from_dict(_BadgeEntry.model_validate(entry).model_dump()))
            except ValidationError as exc:
                skipped += 1
                logger.warning("Skipping malformed metadata entry %d (%d errors)", position, exc.error_count())
        return IndexSnapshot(status=IndexStatus.OK, records=records, skipped=skipped)

    def load_all(self) -> List[BadgeRecord]:
        return self.load().records

    def save_all(self, records: List[BadgeRecord]) -> None:
        """Overwrite the document with the full serialized sequence."""

        try:
            document = json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise WriteFailure(f"Badge metadata is not JSON serializable: {exc}") from exc
        self.blob_store.write_text(self.filename, document)

    def append_one(self, record: BadgeRecord) -> None:
        """Append a record; if that fails, fall back to saving the new record alone."""

        try:
            self.save_all(self.load_all() + [record])
            return
        except StorageError as exc:
            logger.error("Saving metadata failed, retrying with only the new badge: %s", exc)

        try:
            self.save_all([record])
        except StorageError as exc:
            logger.error("Saving metadata fallback failed: %s", exc)
            raise WriteFailure(f"Could not save metadata for badge {record.id}") from exc
        logger.warning("Metadata saved through fallback; only badge %s was kept", record.id)

    def delete_document(self) -> bool:
        return self.blob_store.delete(self.filename)
