# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Image Agent API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.dependencies import get_replicate_client, get_storage_service
from app.exceptions import ImageAgentException, image_agent_exception_handler
from app.routers import generation, health, predictions, schedules

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log configuration
    - Shutdown: close HTTP clients
    """
    logger.info(f"Starting Image Agent API in {settings.ENVIRONMENT} mode")
    logger.info(f"Image model: {settings.REPLICATE_IMAGE_MODEL}  video model: {settings.REPLICATE_VIDEO_MODEL}")

    yield

    logger.info("Shutting down Image Agent API")
    if get_replicate_client.cache_info().currsize:
        get_replicate_client().close()
    if get_storage_service.cache_info().currsize:
        get_storage_service().close()


app = FastAPI(
    title="Image Agent API",
    description="""
## Generation Job Backend

Starts image and video generations on Replicate and tracks them in Supabase.

### Flow

1. **Submit** - `POST /api/v1/generate-image` (synchronous) or
   `POST /api/v1/video-generation` (asynchronous prediction)
2. **Complete** - the prediction poller (Celery beat, or
   `POST /api/v1/predictions/process`, or the Replicate webhook) finalizes
   asynchronous jobs
3. **Schedule** - `POST /api/v1/schedules/process` turns due schedules into jobs
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Generation", "description": "Start image and video generations"},
        {"name": "Predictions", "description": "Finalize asynchronous predictions"},
        {"name": "Schedules", "description": "Process scheduled generation jobs"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ImageAgentException)
async def handle_image_agent_exception(request: Request, exc: ImageAgentException):
    """Handle custom exceptions that escape a router."""
    return await image_agent_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(generation.router, prefix="/api/v1", tags=["Generation"])
app.include_router(predictions.router, prefix="/api/v1/predictions", tags=["Predictions"])
app.include_router(schedules.router, prefix="/api/v1/schedules", tags=["Schedules"])


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Image Agent API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
