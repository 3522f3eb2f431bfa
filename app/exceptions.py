# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception types for the API and the core services.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ImageAgentException(Exception):
    """
    Base exception for the Image Agent backend.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "IMAGE_AGENT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class MissingFieldError(ImageAgentException):
    """Raised when a request is missing one or more required fields."""

    def __init__(self, message: str, fields: list[str]):
        super().__init__(
            message=message,
            code="MISSING_FIELD",
            status_code=400,
            suggestion=f"Include these fields in the request body: {', '.join(fields)}",
            details={"fields": fields},
        )
        self.fields = fields


class InvalidFieldError(ImageAgentException):
    """Raised when an optional field carries an unsupported value."""

    def __init__(self, field: str, value: Any, allowed: list[Any]):
        super().__init__(
            message=f"Invalid value for {field}: {value!r}",
            code="INVALID_FIELD",
            status_code=400,
            suggestion=f"Use one of: {', '.join(str(a) for a in allowed)}" if allowed else None,
            details={"field": field, "value": value, "allowed": allowed},
        )


# =============================================================================
# Project Exceptions
# =============================================================================

class ProjectNotFoundError(ImageAgentException):
    """Raised when a project ID doesn't exist."""

    def __init__(self, project_id: str):
        super().__init__(
            message="Project not found",
            code="PROJECT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the project_id is correct",
            details={"project_id": project_id},
        )


# =============================================================================
# Generation Exceptions
# =============================================================================

class ImageGenerationError(ImageAgentException):
    """
    Raised when an image submission fails after validation.

    Carries the job id that was claimed (if any) and the warnings collected
    while trying to mark that job as failed.
    """

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        warnings: list[str] | None = None,
    ):
        super().__init__(
            message=message,
            code="IMAGE_GENERATION_FAILED",
            status_code=500,
            suggestion="Re-trigger the generation once the cause is fixed",
            details={"job_id": job_id} if job_id else None,
        )
        self.job_id = job_id
        self.warnings = warnings or []


class VideoGenerationError(ImageAgentException):
    """Raised when a video prediction can't be created or recorded."""

    def __init__(self, message: str, code: str = "VIDEO_GENERATION_FAILED"):
        super().__init__(message=message, code=code, status_code=500)


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageUploadError(ImageAgentException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


class StorageDownloadError(ImageAgentException):
    """Raised when a generated artifact can't be downloaded."""

    def __init__(self, url: str, error: str):
        super().__init__(
            message=f"Failed to download generated file: {error}",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            suggestion="Check that the provider output URL has not expired",
            details={"url": url, "error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def image_agent_exception_handler(
    request: Request,
    exc: ImageAgentException
) -> JSONResponse:
    """
    Convert ImageAgentException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
