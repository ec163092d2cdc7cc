"""Blob storage 테스트"""

from snapcircle.services.storage import MemoryBlobStorage, get_blob_storage


class TestMemoryBlobStorage:
    def test_put_and_get(self):
        storage = MemoryBlobStorage(base_url="memory://test/")
        blob = storage.put(b"abc", "photos", "image/jpeg")

        assert blob.key.startswith("photos/")
        assert blob.key.endswith(".jpg")
        assert blob.url == f"memory://test/{blob.key}"
        assert storage.get(blob.key) == b"abc"

    def test_unique_keys(self):
        storage = MemoryBlobStorage()
        keys = {storage.put(b"x", "photos").key for _ in range(5)}
        assert len(keys) == 5
        assert len(storage) == 5

    def test_unknown_content_type(self):
        blob = MemoryBlobStorage().put(b"x", "photos", "application/octet-stream")
        assert blob.key.endswith(".bin")

    def test_delete_missing_is_noop(self):
        storage = MemoryBlobStorage()
        blob = storage.put(b"x", "photos")
        storage.delete(blob.key)
        storage.delete(blob.key)
        assert storage.get(blob.key) is None


class TestFactory:
    def test_memory_backend(self):
        assert get_blob_storage("memory").name == "memory"

    def test_unknown_falls_back(self):
        assert isinstance(get_blob_storage("s3-nowhere"), MemoryBlobStorage)
