"""Blob storage module."""

from snapcircle.services.storage.base import BlobStorage, StoredBlob
from snapcircle.services.storage.factory import get_blob_storage
from snapcircle.services.storage.memory import MemoryBlobStorage

__all__ = [
    "BlobStorage",
    "MemoryBlobStorage",
    "StoredBlob",
    "get_blob_storage",
]
