# =============================================================================
# core/services/video_generation_service.py - Video Job Submission
# =============================================================================
# Creates an asynchronous video prediction and records it as "processing".
# Nothing here waits for the video; PredictionPoller finishes the job.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.config import Settings
from app.exceptions import InvalidFieldError, MissingFieldError, VideoGenerationError
from core.models import (
    VIDEO_DURATIONS,
    VIDEO_MODES,
    VIDEO_REQUIRED_FIELDS,
    ContentStatus,
    ContentType,
    GeneratedContent,
    JobStatus,
    SubmissionOutcome,
    VideoGenerationRequest,
)
from lib.replicate_client import ReplicateClient
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def parse_video_request(payload: dict[str, Any]) -> VideoGenerationRequest:
    """
    Validate a raw video submission.

    Raises:
        MissingFieldError: Any of the six required fields is absent or empty
        InvalidFieldError: mode/duration outside the supported values
    """
    missing = [name for name in VIDEO_REQUIRED_FIELDS if not payload.get(name)]
    if missing:
        logger.error(f"Missing required fields: {missing}")
        raise MissingFieldError("Missing required fields", missing)

    # Treat explicit nulls as "use the default"
    cleaned = {k: v for k, v in payload.items() if v is not None}

    try:
        return VideoGenerationRequest.model_validate(cleaned)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else "body"
        allowed: list[Any] = VIDEO_MODES if field == "mode" else VIDEO_DURATIONS if field == "duration" else []
        raise InvalidFieldError(field, cleaned.get(field), allowed)


class VideoGenerationService:
    """
    Video Generation Submission Handler.

    Example:
        service = VideoGenerationService(store, replicate, settings)
        outcome = service.submit(payload)
        outcome.result["prediction_id"]
    """

    def __init__(
        self,
        store: SupabaseClient,
        provider: ReplicateClient,
        settings: Settings,
    ):
        self._store = store
        self._provider = provider
        self._settings = settings

    def submit(self, payload: dict[str, Any]) -> SubmissionOutcome:
        """
        Create a video prediction and its processing records.

        Returns:
            SubmissionOutcome with result {success, prediction_id, content_id}

        Raises:
            MissingFieldError / InvalidFieldError: before any side effect
            VideoGenerationError: prediction or content row couldn't be created
            ReplicateError: provider rejected the request
        """
        request = parse_video_request(payload)
        model = self._settings.REPLICATE_VIDEO_MODEL

        logger.info(
            f"Video generation for schedule {request.schedule_id}: "
            f"{request.prompt[:100]} (mode={request.mode}, duration={request.duration})"
        )

        prediction = self._provider.create_prediction(model, {
            "prompt": request.prompt,
            "negative_prompt": request.negative_prompt or "",
            "start_image": request.start_image,
            "mode": request.mode,
            "duration": request.duration,
        })

        prediction_id = prediction.get("id") if prediction else None
        if not prediction_id:
            logger.error("Failed to create Replicate prediction")
            raise VideoGenerationError("Failed to create prediction", code="PREDICTION_NOT_CREATED")

        logger.info(f"Replicate prediction created: {prediction_id}")
        now = datetime.now(timezone.utc).isoformat()
        warnings: list[str] = []

        try:
            self._store.update_generation_job(request.generation_job_id, {
                "external_job_id": prediction_id,
                "status": JobStatus.PROCESSING.value,
                "started_at": now,
            })
        except Exception as e:
            logger.error(f"Error updating generation job {request.generation_job_id}: {e}")
            warnings.append(f"Failed to update generation job {request.generation_job_id}: {e}")

        content_row = GeneratedContent(
            schedule_id=request.schedule_id,
            task_id=request.task_id,
            user_id=request.user_id,
            task_type="video-generation",
            content_type=ContentType.VIDEO,
            title=f"Video: {request.prompt[:50]}...",
            description=request.prompt,
            generation_status=ContentStatus.PROCESSING,
            metadata={
                "prompt": request.prompt,
                "negative_prompt": request.negative_prompt,
                "start_image": request.start_image,
                "mode": request.mode,
                "duration": request.duration,
                "model": model,
                "created_at": now,
                "prediction_id": prediction_id,
                "generation_job_id": request.generation_job_id,
            },
        )

        try:
            content = self._store.insert_generated_content(
                content_row.model_dump(mode="json", exclude={"id"}, exclude_none=True)
            )
        except Exception as e:
            logger.error(f"Error inserting generated content: {e}")
            raise VideoGenerationError("Database error", code="CONTENT_INSERT_FAILED") from e

        logger.info(f"Generated content record created: {content['id']}")

        return SubmissionOutcome(
            result={
                "success": True,
                "prediction_id": prediction_id,
                "content_id": content["id"],
            },
            warnings=warnings,
        )
