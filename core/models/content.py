# =============================================================================
# core/models/content.py - Generated Content Schemas
# =============================================================================
# Artifacts produced by a job:
# - generated_images: written once by the synchronous image path
# - generated_content: written as "processing" by the video path and moved
#   to a terminal status exactly once by the prediction poller
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContentStatus(str, Enum):
    """generation_status values of the generated_content table."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ContentType(str, Enum):
    IMAGE = "image"
    DESIGN = "design"
    VIDEO = "video"


# Content types whose results arrive asynchronously through a prediction
POLLED_CONTENT_TYPES = [ContentType.DESIGN.value, ContentType.VIDEO.value]


class GeneratedImage(BaseModel):
    """
    A row of the generated_images table.

    Example:
        {
            "project_id": "P1",
            "generation_job_id": "job-1",
            "image_url": "https://img/x.png",
            "prompt": "a cat",
            "model_used": "black-forest-labs/flux-kontext-max",
            "generation_time_seconds": 4.2
        }
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    project_id: str
    generation_job_id: str | None = None
    image_url: str
    prompt: str
    model_used: str | None = None
    aspect_ratio: str | None = None
    generation_time_seconds: float | None = Field(default=None, ge=0)
    replicate_prediction_id: str | None = None
    storage_path: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class GeneratedContent(BaseModel):
    """A row of the generated_content table."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    schedule_id: str | None = None
    task_id: str | None = None
    user_id: str | None = None
    task_type: str | None = None
    content_type: ContentType
    title: str | None = None
    description: str | None = None
    content_url: str | None = None
    storage_path: str | None = None
    generation_status: ContentStatus = ContentStatus.PROCESSING
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def prediction_id(self) -> str | None:
        return self.metadata.get("prediction_id")
