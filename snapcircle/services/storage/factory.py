"""Factory for creating blob storage instances."""

from typing import Optional

from snapcircle.config import settings
from snapcircle.core.logging import get_logger
from snapcircle.services.storage.base import BlobStorage
from snapcircle.services.storage.memory import MemoryBlobStorage

logger = get_logger(__name__)


def get_blob_storage(provider_name: Optional[str] = None) -> BlobStorage:
    """Get a blob storage instance.

    Args:
        provider_name: Optional backend name. If not specified,
                      uses STORAGE_PROVIDER from config.

    Returns:
        A BlobStorage instance.
    """
    name = provider_name or settings.STORAGE_PROVIDER

    if name == "memory":
        logger.debug("Using MemoryBlobStorage")
        return MemoryBlobStorage(base_url=settings.STORAGE_BASE_URL)

    # Fallback to memory for unknown backends
    logger.warning("Unknown storage provider '%s', falling back to memory", name)
    return MemoryBlobStorage(base_url=settings.STORAGE_BASE_URL)
