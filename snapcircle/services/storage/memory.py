"""In-process blob storage for tests and local development."""

import uuid
from typing import Dict, Optional, Tuple

from snapcircle.services.storage.base import BlobStorage, StoredBlob

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
}


class MemoryBlobStorage(BlobStorage):
    """Keeps blobs in a dict keyed by storage key."""

    def __init__(self, base_url: str = "memory://snapcircle") -> None:
        self._base_url = base_url.rstrip("/")
        self._blobs: Dict[str, Tuple[bytes, str]] = {}

    @property
    def name(self) -> str:
        return "memory"

    def put(self, data: bytes, folder: str, content_type: str = "image/png") -> StoredBlob:
        ext = EXTENSIONS.get(content_type, "bin")
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}.{ext}"
        self._blobs[key] = (data, content_type)
        return StoredBlob(key=key, url=f"{self._base_url}/{key}")

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def get(self, key: str) -> Optional[bytes]:
        entry = self._blobs.get(key)
        return entry[0] if entry else None

    def __len__(self) -> int:
        return len(self._blobs)
