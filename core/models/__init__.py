# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains the schemas shared by the API and the services:
# - project.py: Project rows (prompt + schedule configuration)
# - job.py: Generation job rows and their status machine
# - content.py: Generated image/content rows
# - generation.py: Request/response schemas and service outcome types
# =============================================================================

from .project import Project

from .job import (
    ACTIVE_JOB_STATUSES,
    GenerationJob,
    JobStatus,
)

from .content import (
    POLLED_CONTENT_TYPES,
    ContentStatus,
    ContentType,
    GeneratedContent,
    GeneratedImage,
)

from .generation import (
    VIDEO_DURATIONS,
    VIDEO_MODES,
    VIDEO_REQUIRED_FIELDS,
    ImageGenerationRequest,
    ImageGenerationResponse,
    PollSummary,
    ScheduleRunSummary,
    SubmissionOutcome,
    VideoGenerationRequest,
    VideoGenerationResponse,
)

__all__ = [
    # Project
    "Project",
    # Job
    "ACTIVE_JOB_STATUSES",
    "GenerationJob",
    "JobStatus",
    # Content
    "POLLED_CONTENT_TYPES",
    "ContentStatus",
    "ContentType",
    "GeneratedContent",
    "GeneratedImage",
    # Generation
    "VIDEO_DURATIONS",
    "VIDEO_MODES",
    "VIDEO_REQUIRED_FIELDS",
    "ImageGenerationRequest",
    "ImageGenerationResponse",
    "PollSummary",
    "ScheduleRunSummary",
    "SubmissionOutcome",
    "VideoGenerationRequest",
    "VideoGenerationResponse",
]
