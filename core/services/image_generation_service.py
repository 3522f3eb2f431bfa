# =============================================================================
# core/services/image_generation_service.py - Image Job Submission
# =============================================================================
# Starts one synchronous image generation for a project:
#   1. validate input, load the project
#   2. stop (and pause the schedule) once max_images_to_generate is reached
#   3. create a job row (or claim a pending pre-created one) as "running"
#   4. run the model on Replicate and time it
#   5. copy the output into storage and record the image (primary write)
#   6. complete the job and stamp the project (bookkeeping, non-fatal)
#
# Any failure from step 3 onwards marks the claimed job "failed" on a
# best-effort basis and surfaces as ImageGenerationError.
# =============================================================================

import logging
import time
from datetime import datetime, timezone
from typing import Any

from app.config import Settings
from app.exceptions import (
    ImageGenerationError,
    MissingFieldError,
    ProjectNotFoundError,
)
from core.models import GeneratedImage, JobStatus, Project, SubmissionOutcome
from core.services.storage_service import StorageService, generate_storage_path
from lib.replicate_client import ReplicateClient
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Fixed generation parameters
ASPECT_RATIO = "1:1"
OUTPUT_FORMAT = "png"
SAFETY_TOLERANCE = 2

# Limit used when a project doesn't set max_images_to_generate
DEFAULT_MAX_IMAGES = 10


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def extract_output_url(output: Any) -> str:
    """
    Pull the artifact URL out of a prediction output.

    Accepts a string, or a list whose first element is a string.

    Raises:
        ValueError: For any other shape
    """
    if isinstance(output, list) and output:
        output = output[0]
    if isinstance(output, str) and output:
        return output
    raise ValueError("Invalid output from Replicate API")


class ImageGenerationService:
    """
    Job Submission Handler for images.

    Example:
        service = ImageGenerationService(store, replicate, storage, settings)
        outcome = service.submit("P1")
        outcome.result["image"]["image_url"]
    """

    def __init__(
        self,
        store: SupabaseClient,
        provider: ReplicateClient,
        storage: StorageService,
        settings: Settings,
    ):
        self._store = store
        self._provider = provider
        self._storage = storage
        self._settings = settings

    def submit(
        self,
        project_id: str | None,
        job_id: str | None = None,
        manual_generation: bool = False,
    ) -> SubmissionOutcome:
        """
        Generate one image for a project.

        Args:
            project_id: Target project (required)
            job_id: Pending job to claim instead of creating one
            manual_generation: Whether a user triggered this run

        Returns:
            SubmissionOutcome with result {success, image,
            generation_time_seconds, job_id}, or {success: False, message,
            existing_images, max_images} when the image limit is reached

        Raises:
            MissingFieldError: project_id missing (no store access)
            ProjectNotFoundError: project doesn't exist (no writes)
            ImageGenerationError: anything failing after the limit check
        """
        if not project_id:
            raise MissingFieldError(
                "Missing required field: project_id is required",
                ["project_id"],
            )

        logger.info(
            f"Image generation requested for project {project_id} "
            f"(manual={manual_generation}, job_id={job_id})"
        )

        row = self._store.fetch_project(project_id)
        if not row:
            logger.warning(f"Project not found: {project_id}")
            raise ProjectNotFoundError(project_id)
        project = Project.model_validate(row)

        limited = self._check_limit(project, job_id)
        if limited is not None:
            return limited

        claimed_job_id: str | None = None
        try:
            claimed_job_id = self._claim_job(project, job_id)
            image, duration = self._generate(project, claimed_job_id)
        except Exception as e:
            warnings = self._mark_failed(claimed_job_id, str(e))
            logger.error(f"Image generation failed for project {project_id}: {e}")
            raise ImageGenerationError(str(e), job_id=claimed_job_id, warnings=warnings) from e

        warnings = self._finish(project, claimed_job_id)

        return SubmissionOutcome(
            result={
                "success": True,
                "image": image,
                "generation_time_seconds": duration,
                "job_id": claimed_job_id,
            },
            warnings=warnings,
        )

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _check_limit(self, project: Project, job_id: str | None) -> SubmissionOutcome | None:
        """
        Stop once the project has max_images_to_generate images.

        The project's schedule is paused and a supplied pending job is
        closed as failed; both writes are non-fatal.
        """
        max_images = project.max_images_to_generate or DEFAULT_MAX_IMAGES
        existing = self._store.count_generated_images(project.id)
        if existing < max_images:
            return None

        message = f"Schedule paused: reached max images limit of {max_images}"
        logger.info(f"Project {project.id} has reached max images limit ({max_images})")
        warnings: list[str] = []

        try:
            self._store.update_project(project.id, {"schedule_enabled": False})
        except Exception as e:
            logger.error(f"Failed to pause schedule for project {project.id}: {e}")
            warnings.append(f"Failed to pause schedule for project {project.id}: {e}")

        if job_id:
            try:
                self._store.update_generation_job(
                    job_id,
                    {
                        "status": JobStatus.FAILED.value,
                        "error_message": message,
                        "completed_at": _now(),
                    },
                    only_statuses=[JobStatus.PENDING.value],
                )
            except Exception as e:
                logger.error(f"Failed to close job {job_id}: {e}")
                warnings.append(f"Failed to close job {job_id}: {e}")

        return SubmissionOutcome(
            result={
                "success": False,
                "message": message,
                "existing_images": existing,
                "max_images": max_images,
            },
            warnings=warnings,
        )

    def _claim_job(self, project: Project, job_id: str | None) -> str:
        """Create a running job, or move the supplied pending one to running."""
        now = _now()

        if job_id:
            logger.info(f"Claiming pending job {job_id}")
            updated = self._store.update_generation_job(
                job_id,
                {"status": JobStatus.RUNNING.value, "started_at": now},
                only_statuses=[JobStatus.PENDING.value],
            )
            if updated is None:
                raise ValueError(f"Generation job {job_id} is not claimable (missing or not pending)")
            return job_id

        job = self._store.insert_generation_job({
            "project_id": project.id,
            "status": JobStatus.RUNNING.value,
            "scheduled_at": now,
            "started_at": now,
        })
        logger.info(f"Created generation job {job['id']} for project {project.id}")
        return job["id"]

    def _generate(self, project: Project, job_id: str) -> tuple[dict[str, Any], float]:
        """Run the model, store the output and record the image. Returns (image row, seconds)."""
        model = project.replicate_model_id or self._settings.REPLICATE_IMAGE_MODEL
        prompt = project.prompt or ""

        model_input: dict[str, Any] = {
            "prompt": prompt,
            "aspect_ratio": ASPECT_RATIO,
            "output_format": OUTPUT_FORMAT,
            "safety_tolerance": SAFETY_TOLERANCE,
        }
        if project.reference_image_url:
            model_input["input_image"] = project.reference_image_url

        started = time.monotonic()
        prediction = self._provider.run(model, model_input)
        duration = round(time.monotonic() - started, 3)
        logger.info(f"Image generation completed in {duration} seconds")

        output_url = extract_output_url(prediction.get("output"))

        # Provider URLs expire, so the stored copy is what gets recorded
        path = generate_storage_path(
            user_id=project.user_id or "anonymous",
            project_id=project.id,
            project_type="image-generation",
        )
        image_url = self._storage.store_remote_file(output_url, path)

        image = GeneratedImage(
            project_id=project.id,
            generation_job_id=job_id,
            image_url=image_url,
            storage_path=path,
            prompt=prompt,
            model_used=model,
            aspect_ratio=ASPECT_RATIO,
            generation_time_seconds=duration,
            replicate_prediction_id=prediction.get("id"),
            metadata={
                "prediction_id": prediction.get("id"),
                "replicate_output_url": output_url,
                "output_format": OUTPUT_FORMAT,
                "reference_image_url": project.reference_image_url,
            },
        )
        saved = self._store.insert_generated_image(
            image.model_dump(exclude={"id"}, exclude_none=True)
        )
        return saved, duration

    def _finish(self, project: Project, job_id: str) -> list[str]:
        """Complete the job and stamp the project; failures become warnings."""
        warnings: list[str] = []
        now = _now()

        try:
            self._store.update_generation_job(job_id, {
                "status": JobStatus.COMPLETED.value,
                "images_generated": 1,
                "completed_at": now,
            })
        except Exception as e:
            logger.error(f"Job completion update failed for {job_id}: {e}")
            warnings.append(f"Failed to mark job {job_id} completed: {e}")

        try:
            self._store.update_project(project.id, {"last_generation_at": now})
        except Exception as e:
            logger.error(f"Project timestamp update failed for {project.id}: {e}")
            warnings.append(f"Failed to update last_generation_at for project {project.id}: {e}")

        return warnings

    def _mark_failed(self, job_id: str | None, error: str) -> list[str]:
        if not job_id:
            return []

        try:
            self._store.update_generation_job(job_id, {
                "status": JobStatus.FAILED.value,
                "error_message": error or "Unknown error",
                "completed_at": _now(),
            })
        except Exception as e:
            logger.error(f"Failed to update job {job_id} status to failed: {e}")
            return [f"Failed to mark job {job_id} failed: {e}"]

        return []
