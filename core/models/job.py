# =============================================================================
# core/models/job.py - Generation Job Schemas
# =============================================================================
# A generation job is this system's own record of one generation attempt,
# distinct from the provider's prediction id (stored as external_job_id).
#
# Status flow:
#   pending -> running    -> completed | failed   (synchronous image path)
#   pending -> processing -> completed | failed   (asynchronous video path)
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """
    Lifecycle states of a generation job.

    - pending: created by the scheduler, not picked up yet
    - running: a synchronous provider call is in flight
    - processing: an asynchronous prediction was created, waiting on the poller
    - completed / failed: terminal
    """
    PENDING = "pending"
    RUNNING = "running"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# Statuses a job may still leave
ACTIVE_JOB_STATUSES = [
    JobStatus.PENDING.value,
    JobStatus.RUNNING.value,
    JobStatus.PROCESSING.value,
]


class GenerationJob(BaseModel):
    """A row of the generation_jobs table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    project_id: str | None = None
    schedule_id: str | None = None
    user_id: str | None = None
    status: JobStatus = JobStatus.PENDING

    # Provider prediction id (asynchronous path)
    external_job_id: str | None = None

    scheduled_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    images_generated: int | None = Field(default=None, ge=0)
    error_message: str | None = None
