"""Abstract base class for blob storage backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredBlob:
    """Address of a stored blob."""

    key: str
    url: str


class BlobStorage(ABC):
    """Abstract base class for blob storage backends.

    Photo metadata lives in the database; the binary goes through
    one of these backends and only its key and URL are persisted.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend name."""
        ...

    @abstractmethod
    def put(self, data: bytes, folder: str, content_type: str = "image/png") -> StoredBlob:
        """Store bytes under a new key inside ``folder``.

        Args:
            data: Raw bytes to store.
            folder: Logical folder prefix (e.g. ``"photos"``).
            content_type: MIME type recorded with the blob.

        Returns:
            The key and public URL of the stored blob.
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a blob. Missing keys are ignored."""
        ...
