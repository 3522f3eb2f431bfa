# =============================================================================
# core/models/project.py - Project Schema
# =============================================================================
# A project holds the prompt and scheduling configuration that generation
# jobs are started from. Rows are owned by the dashboard; this service only
# reads them and bumps last_generation_at.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Project(BaseModel):
    """
    A row of the projects table.

    Unknown columns are ignored so schema additions on the dashboard side
    don't break parsing here.

    Example:
        {
            "id": "P1",
            "user_id": "u-1",
            "name": "Cats",
            "prompt": "a cat",
            "schedule_enabled": true,
            "generation_interval_minutes": 60
        }
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Project identifier")
    user_id: str | None = Field(default=None, description="Owner of the project")
    name: str | None = Field(default=None, description="Display name")

    # Generation inputs
    prompt: str | None = Field(default=None, description="Free-text generation prompt")
    reference_image_url: str | None = Field(
        default=None,
        description="Optional reference image passed to the model as input_image"
    )
    replicate_model_id: str | None = Field(
        default=None,
        description="Model override; falls back to the configured default"
    )

    # Scheduling configuration
    schedule_enabled: bool | None = Field(default=None)
    generation_interval_minutes: int | None = Field(default=None)
    max_images_to_generate: int | None = Field(default=None)
    schedule_duration_hours: int | None = Field(default=None)
    last_generation_at: datetime | None = Field(default=None)
