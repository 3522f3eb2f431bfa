# =============================================================================
# app/routers/generation.py - Generation Submission Endpoints
# =============================================================================
# - POST /generate-image: synchronous image generation for a project
# - POST /video-generation: asynchronous video prediction
#
# Response shapes are what the dashboard already consumes: JSON {error} /
# {error, success} for images, plain text errors for video.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from app.dependencies import ImageServiceDep, VideoServiceDep
from app.exceptions import (
    ImageAgentException,
    InvalidFieldError,
    MissingFieldError,
)
from core.models import ImageGenerationRequest, ImageGenerationResponse, VideoGenerationResponse

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


# =============================================================================
# Image Generation
# =============================================================================

@router.options("/generate-image", include_in_schema=False)
async def generate_image_preflight():
    """Answer CORS preflight unconditionally."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post(
    "/generate-image",
    response_model=ImageGenerationResponse,
    responses={400: {"description": "project_id missing"}, 500: {"description": "Generation failed"}},
)
def generate_image(
    service: ImageServiceDep,
    request: ImageGenerationRequest | None = None,
):
    """
    Generate one image for a project.

    Creates a generation job (or advances the one given as job_id), runs the
    project's prompt on Replicate and records the result.
    """
    request = request or ImageGenerationRequest()

    try:
        outcome = service.submit(
            request.project_id,
            job_id=request.job_id,
            manual_generation=request.manual_generation,
        )
    except MissingFieldError as e:
        return JSONResponse(status_code=400, content={"error": e.message}, headers=CORS_HEADERS)
    except ImageAgentException as e:
        return JSONResponse(
            status_code=500,
            content={"error": e.message, "success": False},
            headers=CORS_HEADERS,
        )
    except Exception as e:
        logger.exception(f"Error in generate-image: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "success": False},
            headers=CORS_HEADERS,
        )

    for warning in outcome.warnings:
        logger.warning(f"generate-image: {warning}")

    return JSONResponse(content=outcome.result, headers=CORS_HEADERS)


# =============================================================================
# Video Generation
# =============================================================================

@router.post(
    "/video-generation",
    response_model=VideoGenerationResponse,
    responses={400: {"description": "Missing or invalid fields"}, 500: {"description": "Prediction failed"}},
)
async def video_generation(request: Request, service: VideoServiceDep):
    """
    Start a video prediction on Replicate.

    Returns as soon as the prediction exists; the prediction poller completes
    the job and its content row later.
    """
    try:
        payload: Any = await request.json()
    except ValueError:
        return PlainTextResponse("Invalid JSON body", status_code=400)

    if not isinstance(payload, dict):
        return PlainTextResponse("Missing required fields", status_code=400)

    try:
        outcome = await run_in_threadpool(service.submit, payload)
    except MissingFieldError:
        return PlainTextResponse("Missing required fields", status_code=400)
    except InvalidFieldError as e:
        return PlainTextResponse(e.message, status_code=400)
    except ImageAgentException as e:
        return PlainTextResponse(e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Video generation processor error: {e}")
        return PlainTextResponse(f"Error: {e}", status_code=500)

    for warning in outcome.warnings:
        logger.warning(f"video-generation: {warning}")

    return outcome.result
