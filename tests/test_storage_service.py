# =============================================================================
# tests/test_storage_service.py - Storage Path and Upload Tests
# =============================================================================
# Run with: pytest tests/test_storage_service.py -v
# =============================================================================

import httpx
import pytest

from app.exceptions import StorageDownloadError, StorageUploadError
from core.services.storage_service import (
    StorageService,
    content_type_for,
    generate_storage_path,
)
from tests.fakes import FakeStore


# =============================================================================
# Path Generation
# =============================================================================

class TestGenerateStoragePath:
    """Tests for generate_storage_path."""

    @pytest.mark.parametrize("project_type,expected", [
        ("image-generation", "u1/image-generation/p1/generated_1700000000000.png"),
        ("print-on-shirt", "u1/print-on-shirt/p1/design_1700000000000.png"),
        ("journal", "u1/journal/p1/journal_1700000000000.png"),
        ("video-generation", "u1/video-generation/p1/video_1700000000000.mp4"),
    ])
    def test_known_types(self, project_type, expected):
        assert generate_storage_path("u1", "p1", project_type, 1700000000000) == expected

    def test_default_timestamp(self):
        path = generate_storage_path("u1", "p1", "journal")
        stamp = path.rsplit("_", 1)[1].split(".")[0]
        assert stamp.isdigit()

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown project type: poster"):
            generate_storage_path("u1", "p1", "poster")

    def test_content_type(self):
        assert content_type_for("a/b.png") == "image/png"
        assert content_type_for("a/b.mp4") == "video/mp4"
        assert content_type_for("a/b.bin") == "application/octet-stream"


# =============================================================================
# StorageService
# =============================================================================

def make_service(settings, handler, store=None):
    store = store or FakeStore()
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return StorageService(store, settings, http_client=http), store


class TestStorageService:
    """Tests for StorageService."""

    def test_store_remote_file(self, settings):
        service, store = make_service(
            settings,
            lambda request: httpx.Response(200, content=b"video-bytes"),
        )

        url = service.store_remote_file("https://replicate.delivery/v.mp4", "u/video-generation/t/video_1.mp4")

        assert store.uploads == [(
            "generated-images",
            "u/video-generation/t/video_1.mp4",
            b"video-bytes",
            "video/mp4",
        )]
        assert url == "https://storage.test/generated-images/u/video-generation/t/video_1.mp4"

    def test_download_error(self, settings):
        service, store = make_service(settings, lambda request: httpx.Response(404))

        with pytest.raises(StorageDownloadError):
            service.store_remote_file("https://replicate.delivery/gone.mp4", "u/x.mp4")

        assert store.uploads == []

    def test_upload_error(self, settings):
        store = FakeStore()
        store.failing.add("upload_file")
        service, _ = make_service(settings, lambda request: httpx.Response(200, content=b"x"), store)

        with pytest.raises(StorageUploadError):
            service.store_remote_file("https://replicate.delivery/v.mp4", "u/x.mp4")

    def test_bucket_for(self, settings):
        service, _ = make_service(settings, lambda request: httpx.Response(200))

        assert service.bucket_for("generated") == "generated-images"
        assert service.bucket_for("user-input") == "user-bucket-images"
        with pytest.raises(ValueError):
            service.bucket_for("other")
