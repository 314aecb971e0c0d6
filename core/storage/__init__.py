# Path: core/storage/__init__.py
# Purpose: Package initializer for blob storage, the metadata index, and the badge record store.
# Layer: core/storage.
# Details: Exposes the BlobStore contract, its filesystem implementation, and BadgeStorage.

from .badge_storage import BadgeStorage
from .base import BlobStore
from .file_blob_store import FileBlobStore
from .metadata_index import IndexSnapshot, IndexStatus, MetadataIndex

__all__ = [
    "BadgeStorage",
    "BlobStore",
    "FileBlobStore",
    "IndexSnapshot",
    "IndexStatus",
    "MetadataIndex",
]
