# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for the Supabase tables, RPCs and
# storage buckets the generation services touch:
# - projects: prompt + schedule configuration (read, timestamp update)
# - generation_jobs: one row per generation attempt
# - generated_images: image results (synchronous path)
# - generated_content: video/design results (asynchronous path)
# - storage: generated artifact uploads
#
# The wrapper is constructed explicitly (no module level client) so services
# can be handed a real one in production and a fake one in tests.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   store = SupabaseClient.from_settings(settings)
#   project = store.fetch_project(project_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING
from uuid import UUID

from supabase import create_client, Client

if TYPE_CHECKING:
    from app.config import Settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "no rows" on .single()
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database and storage operations.

    The underlying supabase-py client is created lazily on first use, so
    constructing the wrapper never touches the network.

    Example:
        store = SupabaseClient(url, service_key)
        job = store.insert_generation_job({"project_id": "...", "status": "running"})
        store.update_generation_job(job["id"], {"status": "completed"})
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        client: Client | None = None,
    ):
        self._url = url
        self._service_key = service_key
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseClient:
        """Build a wrapper from application settings."""
        return cls(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)

    def get_client(self) -> Client:
        """
        Get or create the Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if self._client is None:
            try:
                self._client = create_client(self._url, self._service_key)
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return self._client

    @staticmethod
    def _normalize_uuid(uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    def _insert(self, table: str, data: dict[str, Any], code: str) -> dict[str, Any]:
        client = self.get_client()

        try:
            response = client.table(table).insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code=code,
                details={"table": table},
            )

        if response.data:
            return response.data[0]
        raise SupabaseClientError(
            message=f"Insert into {table} returned no data",
            code="INSERT_NO_DATA",
            details={"table": table},
        )

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def fetch_project(self, project_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a project by ID.

        Returns:
            Project dict with all fields, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = self.get_client()
        project_id_str = self._normalize_uuid(project_id)

        try:
            response = (
                client.table("projects")
                .select("*")
                .eq("id", project_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch project: {e}",
                code="FETCH_PROJECT_FAILED",
                suggestion="Check that the project_id exists",
                details={"project_id": project_id_str}
            )

    def update_project(
        self,
        project_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Update a project row, returning it (None if nothing matched)."""
        client = self.get_client()
        project_id_str = self._normalize_uuid(project_id)

        try:
            response = (
                client.table("projects")
                .update(data)
                .eq("id", project_id_str)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update project: {e}",
                code="UPDATE_PROJECT_FAILED",
                details={"project_id": project_id_str}
            )

        return response.data[0] if response.data else None

    # -------------------------------------------------------------------------
    # Generation Jobs
    # -------------------------------------------------------------------------

    def insert_generation_job(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a generation job.

        Returns:
            Inserted job dict with generated id

        Raises:
            SupabaseClientError: If insert fails
        """
        return self._insert("generation_jobs", data, "INSERT_JOB_FAILED")

    def update_generation_job(
        self,
        job_id: str | UUID,
        data: dict[str, Any],
        only_statuses: list[str] | None = None,
    ) -> dict[str, Any] | None:
        """
        Update a generation job.

        Args:
            job_id: The job UUID
            data: Columns to set
            only_statuses: If given, only update while the job is in one of
                these statuses (a conditional transition)

        Returns:
            The updated row, or None when no row matched
        """
        client = self.get_client()
        job_id_str = self._normalize_uuid(job_id)

        try:
            query = client.table("generation_jobs").update(data).eq("id", job_id_str)
            if only_statuses:
                query = query.in_("status", only_statuses)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update generation job: {e}",
                code="UPDATE_JOB_FAILED",
                details={"job_id": job_id_str}
            )

        return response.data[0] if response.data else None

    def update_jobs_by_external_id(
        self,
        external_job_id: str,
        data: dict[str, Any],
        only_statuses: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Update every job recorded against a provider prediction id."""
        client = self.get_client()

        try:
            query = (
                client.table("generation_jobs")
                .update(data)
                .eq("external_job_id", external_job_id)
            )
            if only_statuses:
                query = query.in_("status", only_statuses)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update jobs for prediction: {e}",
                code="UPDATE_JOB_FAILED",
                details={"external_job_id": external_job_id}
            )

        return response.data or []

    def fetch_pending_jobs(self, limit: int = 5) -> list[dict[str, Any]]:
        """Fetch pending jobs, oldest scheduled first."""
        client = self.get_client()

        try:
            response = (
                client.table("generation_jobs")
                .select("*")
                .eq("status", "pending")
                .order("scheduled_at")
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch pending jobs: {e}",
                code="FETCH_JOBS_FAILED",
                details={"limit": limit}
            )

        jobs = response.data or []
        logger.debug(f"Fetched {len(jobs)} pending jobs")
        return jobs

    def create_scheduled_jobs(self) -> None:
        """Run the create_scheduled_jobs RPC, which enqueues due schedules."""
        client = self.get_client()

        try:
            client.rpc("create_scheduled_jobs", {}).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create scheduled jobs: {e}",
                code="RPC_FAILED",
                suggestion="Check that the create_scheduled_jobs function exists in the database",
            )

    # -------------------------------------------------------------------------
    # Generated Images / Content
    # -------------------------------------------------------------------------

    def insert_generated_image(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a generated_images row."""
        return self._insert("generated_images", data, "INSERT_IMAGE_FAILED")

    def count_generated_images(self, project_id: str | UUID) -> int:
        """Number of generated_images rows recorded for a project."""
        client = self.get_client()
        project_id_str = self._normalize_uuid(project_id)

        try:
            response = (
                client.table("generated_images")
                .select("id", count="exact")
                .eq("project_id", project_id_str)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count generated images: {e}",
                code="COUNT_IMAGES_FAILED",
                details={"project_id": project_id_str}
            )

        return response.count or 0

    def insert_generated_content(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a generated_content row."""
        return self._insert("generated_content", data, "INSERT_CONTENT_FAILED")

    def update_generated_content(
        self,
        content_id: str | UUID,
        data: dict[str, Any],
        only_status: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Update a generated_content row.

        With only_status set the update only applies while the row still has
        that generation_status; None is returned when another writer got there
        first.
        """
        client = self.get_client()
        content_id_str = self._normalize_uuid(content_id)

        try:
            query = client.table("generated_content").update(data).eq("id", content_id_str)
            if only_status:
                query = query.eq("generation_status", only_status)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update generated content: {e}",
                code="UPDATE_CONTENT_FAILED",
                details={"content_id": content_id_str}
            )

        return response.data[0] if response.data else None

    def fetch_processing_content(
        self,
        content_types: list[str],
    ) -> list[dict[str, Any]]:
        """
        Fetch content still waiting on a provider prediction.

        Only rows whose metadata carries a prediction_id are returned.
        """
        client = self.get_client()

        try:
            response = (
                client.table("generated_content")
                .select("*, schedules(id, task_id, name)")
                .eq("generation_status", "processing")
                .in_("content_type", content_types)
                .not_.is_("metadata->prediction_id", "null")
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch processing content: {e}",
                code="FETCH_CONTENT_FAILED",
                details={"content_types": content_types}
            )

        return response.data or []

    def fetch_content_by_prediction_id(self, prediction_id: str) -> dict[str, Any] | None:
        """Find the content row recorded against a prediction id."""
        client = self.get_client()

        try:
            response = (
                client.table("generated_content")
                .select("*, schedules(id, task_id, name)")
                .eq("metadata->>prediction_id", prediction_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch content for prediction: {e}",
                code="FETCH_CONTENT_FAILED",
                details={"prediction_id": prediction_id}
            )

        return response.data[0] if response.data else None

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def upload_file(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
    ) -> str:
        """Upload bytes to a storage bucket and return the path."""
        client = self.get_client()

        try:
            client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upload {path}: {e}",
                code="STORAGE_UPLOAD_FAILED",
                details={"bucket": bucket, "path": path}
            )

        logger.info(f"Uploaded file to storage: {bucket}/{path}")
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        """Public URL of an object in a storage bucket."""
        return self.get_client().storage.from_(bucket).get_public_url(path)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        """Cheap query used by the readiness check."""
        self.get_client().table("projects").select("id").limit(1).execute()
