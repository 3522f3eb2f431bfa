# =============================================================================
# core/services/schedule_service.py - Schedule Processor
# =============================================================================
# Turns due schedules into generations:
#   1. ask the database to enqueue jobs for due schedules (RPC)
#   2. pick up a batch of pending jobs, oldest first
#   3. run each through the image handler, passing the job id so the
#      pre-created row is claimed instead of duplicated
#
# A job that can never run (malformed row, missing project) is closed as
# failed so it stops occupying the head of the pending queue. Transient
# errors leave it pending for the next run.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.config import Settings
from app.exceptions import ImageAgentException, MissingFieldError, ProjectNotFoundError
from core.models import GenerationJob, JobStatus, ScheduleRunSummary
from core.services.image_generation_service import ImageGenerationService
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


class ScheduleProcessor:
    """
    Processes pending scheduled generation jobs.

    Per-job failures are collected in the summary, never raised.
    """

    def __init__(
        self,
        store: SupabaseClient,
        image_service: ImageGenerationService,
        settings: Settings,
    ):
        self._store = store
        self._image_service = image_service
        self._batch_size = settings.SCHEDULE_BATCH_SIZE

    def run(self) -> ScheduleRunSummary:
        """
        Enqueue due schedules and process one batch of pending jobs.

        Raises:
            SupabaseClientError: If pending jobs can't be fetched
        """
        summary = ScheduleRunSummary()

        try:
            self._store.create_scheduled_jobs()
            logger.info("Scheduled jobs created successfully")
        except SupabaseClientError as e:
            logger.error(f"Error creating scheduled jobs: {e}")
            summary.warnings.append(f"create_scheduled_jobs failed: {e.message}")

        rows = self._store.fetch_pending_jobs(limit=self._batch_size)
        summary.total_jobs = len(rows)
        logger.info(f"Found {len(rows)} pending jobs")

        for row in rows:
            self._process(row, summary)

        logger.info(
            f"Scheduler completed: {summary.processed}/{summary.total_jobs} jobs processed successfully"
        )
        return summary

    def _process(self, row: dict[str, Any], summary: ScheduleRunSummary) -> None:
        job_id = row.get("id")

        try:
            job = GenerationJob.model_validate(row)
        except ValidationError as e:
            error = f"Invalid job row: {e.error_count()} validation error(s)"
            logger.error(f"Job {job_id} can't be run: {e}")
            self._close_unrunnable(job_id, error, summary)
            self._record_failure(summary, job_id, error)
            return

        logger.info(f"Processing job {job.id} for project {job.project_id}")

        try:
            outcome = self._image_service.submit(
                job.project_id,
                job_id=job.id,
                manual_generation=False,
            )
        except (MissingFieldError, ProjectNotFoundError) as e:
            logger.error(f"Job {job.id} can't be run: {e.message}")
            self._close_unrunnable(job.id, e.message, summary)
            self._record_failure(summary, job.id, e.message)
            return
        except ImageAgentException as e:
            logger.error(f"Generation failed for job {job.id}: {e.message}")
            summary.warnings.extend(getattr(e, "warnings", []))
            self._record_failure(summary, job.id, e.message)
            return
        except Exception as e:
            logger.exception(f"Unexpected error processing job {job.id}: {e}")
            self._record_failure(summary, job.id, str(e))
            return

        summary.warnings.extend(outcome.warnings)

        if not outcome.result.get("success"):
            self._record_failure(summary, job.id, outcome.result.get("message", "Generation skipped"))
            return

        summary.processed += 1
        summary.results.append({
            "job_id": job.id,
            "success": True,
            "image_url": outcome.result["image"].get("image_url"),
        })

    def _close_unrunnable(self, job_id: str | None, error: str, summary: ScheduleRunSummary) -> None:
        """Mark a job that can never run as failed, only while it is still pending."""
        if not job_id:
            return

        try:
            self._store.update_generation_job(
                job_id,
                {
                    "status": JobStatus.FAILED.value,
                    "error_message": error,
                    "completed_at": datetime.now(timezone.utc).isoformat(),
                },
                only_statuses=[JobStatus.PENDING.value],
            )
        except Exception as e:
            logger.error(f"Failed to mark job {job_id} failed: {e}")
            summary.warnings.append(f"Failed to mark job {job_id} failed: {e}")

    @staticmethod
    def _record_failure(summary: ScheduleRunSummary, job_id: str | None, error: str) -> None:
        summary.results.append({
            "job_id": job_id,
            "success": False,
            "error": error,
        })
