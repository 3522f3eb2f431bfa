# =============================================================================
# core/models/generation.py - Generation Request/Response Schemas
# =============================================================================
# These models define the HTTP contract of the submission endpoints and the
# result types the services hand back to their callers.
#
# Services return outcome objects that keep the primary result apart from
# non-fatal bookkeeping warnings, so callers (and tests) can check both.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field


# =============================================================================
# Image Submission
# =============================================================================

class ImageGenerationRequest(BaseModel):
    """
    Body of POST /generate-image.

    project_id is optional at the schema level so a missing value can be
    answered with the handler's own 400 message instead of a 422.

    Example:
        {"project_id": "P1", "manual_generation": true}
    """

    project_id: str | None = Field(
        default=None,
        description="Project to generate for (required)"
    )
    manual_generation: bool = Field(
        default=False,
        description="True when a user clicked generate, False for scheduled runs"
    )
    job_id: str | None = Field(
        default=None,
        description="Pre-created job to advance instead of inserting a new one"
    )


class ImageGenerationResponse(BaseModel):
    """Successful POST /generate-image response."""
    success: bool = True
    image: dict[str, Any]
    generation_time_seconds: float
    job_id: str


# =============================================================================
# Video Submission
# =============================================================================

VIDEO_REQUIRED_FIELDS = [
    "schedule_id",
    "generation_job_id",
    "prompt",
    "start_image",
    "user_id",
    "task_id",
]

VIDEO_MODES = ["standard", "pro"]
VIDEO_DURATIONS = [5, 10]


class VideoGenerationRequest(BaseModel):
    """
    Body of POST /video-generation.

    Presence of the six required fields is checked by the service on the raw
    payload before this model is built; the model validates mode/duration.
    """

    schedule_id: str | None = None
    generation_job_id: str | None = None
    prompt: str | None = None
    negative_prompt: str | None = None
    start_image: str | None = None
    mode: Literal["standard", "pro"] = "standard"
    duration: Literal[5, 10] = 5
    user_id: str | None = None
    task_id: str | None = None


class VideoGenerationResponse(BaseModel):
    """Successful POST /video-generation response."""
    success: bool = True
    prediction_id: str
    content_id: str


# =============================================================================
# Outcomes
# =============================================================================

@dataclass
class SubmissionOutcome:
    """
    Result of a submission.

    result holds what the caller is told; warnings lists bookkeeping writes
    that failed without invalidating the result.
    """
    result: dict[str, Any]
    warnings: list[str] = field(default_factory=list)


@dataclass
class PollSummary:
    """Result of one poller pass over processing content."""
    completed: int = 0
    failed: int = 0
    pending: int = 0
    skipped: int = 0
    total_checked: int = 0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": f"Processed {self.total_checked} predictions",
            "completed": self.completed,
            "failed": self.failed,
            "pending": self.pending,
            "skipped": self.skipped,
            "total_checked": self.total_checked,
            "warnings": self.warnings,
        }


@dataclass
class ScheduleRunSummary:
    """Result of one schedule processor run."""
    processed: int = 0
    total_jobs: int = 0
    results: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.total_jobs:
            message = "No pending jobs to process"
        else:
            message = f"Processed {self.processed} jobs successfully"
        return {
            "message": message,
            "processed": self.processed,
            "total_jobs": self.total_jobs,
            "results": self.results,
            "warnings": self.warnings,
        }
