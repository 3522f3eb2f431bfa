# =============================================================================
# core/services/storage_service.py - Generated Artifact Storage
# =============================================================================
# Storage layout shared by every project type:
#   <user_id>/<project_type>/<project_id>/<prefix>_<timestamp>.<ext>
#
# StorageService copies a provider output URL into a Supabase Storage bucket
# and hands back the public URL.
# =============================================================================

import logging
import time

import httpx

from app.config import Settings
from app.exceptions import StorageDownloadError, StorageUploadError
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

# project type -> (file prefix, extension)
PROJECT_TYPE_FILES = {
    "image-generation": ("generated", "png"),
    "print-on-shirt": ("design", "png"),
    "journal": ("journal", "png"),
    "video-generation": ("video", "mp4"),
}

CONTENT_TYPES = {
    "png": "image/png",
    "mp4": "video/mp4",
}


def generate_storage_path(
    user_id: str,
    project_id: str,
    project_type: str,
    timestamp: int | None = None,
) -> str:
    """
    Build the storage path for a generated artifact.

    Args:
        user_id: Owner of the artifact
        project_id: Project (or task) the artifact belongs to
        project_type: One of PROJECT_TYPE_FILES
        timestamp: Milliseconds since epoch (defaults to now)

    Raises:
        ValueError: For an unknown project type

    Example:
        generate_storage_path("u1", "p1", "image-generation", 1700000000000)
        -> "u1/image-generation/p1/generated_1700000000000.png"
    """
    if project_type not in PROJECT_TYPE_FILES:
        raise ValueError(f"Unknown project type: {project_type}")

    prefix, ext = PROJECT_TYPE_FILES[project_type]
    ts = timestamp if timestamp is not None else int(time.time() * 1000)
    return f"{user_id}/{project_type}/{project_id}/{prefix}_{ts}.{ext}"


def content_type_for(path: str) -> str:
    """MIME type of a storage path, by extension."""
    ext = path.rsplit(".", 1)[-1].lower()
    return CONTENT_TYPES.get(ext, "application/octet-stream")


class StorageService:
    """
    Service for copying generated files into Supabase Storage.
    """

    def __init__(
        self,
        store: SupabaseClient,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ):
        self._store = store
        self._settings = settings
        self._http = http_client or httpx.Client(
            timeout=settings.REPLICATE_TIMEOUT,
            follow_redirects=True,
        )

    def close(self) -> None:
        self._http.close()

    def bucket_for(self, kind: str) -> str:
        """
        Bucket name for a kind of content ("generated" or "user-input").
        """
        if kind == "generated":
            return self._settings.GENERATED_BUCKET
        if kind == "user-input":
            return self._settings.USER_INPUT_BUCKET
        raise ValueError(f"Unknown content kind: {kind}")

    def download(self, url: str) -> bytes:
        """
        Download a remote file.

        Raises:
            StorageDownloadError: On transport errors or non-2xx responses
        """
        try:
            response = self._http.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Download failed for {url}: {e}")
            raise StorageDownloadError(url, str(e))

        return response.content

    def store_remote_file(self, url: str, path: str) -> str:
        """
        Copy a remote file into the generated bucket.

        Args:
            url: Provider output URL
            path: Destination path (see generate_storage_path)

        Returns:
            Public URL of the stored object

        Raises:
            StorageDownloadError: If the source can't be fetched
            StorageUploadError: If the upload fails
        """
        content = self.download(url)
        bucket = self.bucket_for("generated")

        try:
            self._store.upload_file(bucket, path, content, content_type_for(path))
        except SupabaseClientError as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(e.message)

        public_url = self._store.get_public_url(bucket, path)
        logger.info(f"Stored {url} at {public_url}")
        return public_url
