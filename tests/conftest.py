# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides in-memory store/provider fakes wired into the services
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.main builds its settings at import time

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("REPLICATE_API_TOKEN", "test-replicate-token")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.config import Settings
from core.services import (
    ImageGenerationService,
    PredictionPoller,
    ScheduleProcessor,
    VideoGenerationService,
)
from tests.fakes import FakeReplicate, FakeStorage, FakeStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Settings built explicitly, independent of any .env file."""
    return Settings(
        _env_file=None,
        SUPABASE_URL="https://test-project.supabase.co",
        SUPABASE_SERVICE_KEY="test-service-key",
        REPLICATE_API_TOKEN="test-replicate-token",
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def provider():
    return FakeReplicate()


@pytest.fixture
def storage(store):
    return FakeStorage(store)


@pytest.fixture
def sample_project(store):
    """A project row with a prompt and no reference image."""
    project = {
        "id": "P1",
        "user_id": "user-1",
        "name": "Cats",
        "prompt": "a cat",
        "reference_image_url": None,
        "replicate_model_id": None,
        "schedule_enabled": True,
        "generation_interval_minutes": 60,
    }
    store.projects["P1"] = project
    return project


@pytest.fixture
def image_service(store, provider, storage, settings):
    return ImageGenerationService(store, provider, storage, settings)


@pytest.fixture
def video_service(store, provider, settings):
    return VideoGenerationService(store, provider, settings)


@pytest.fixture
def poller(store, provider, storage):
    return PredictionPoller(store, provider, storage)


@pytest.fixture
def schedule_processor(store, image_service, settings):
    return ScheduleProcessor(store, image_service, settings)


@pytest.fixture
def video_payload():
    """A complete video-generation request body."""
    return {
        "schedule_id": "S1",
        "generation_job_id": "J1",
        "prompt": "a cat surfing a wave at sunset",
        "start_image": "https://img/start.png",
        "user_id": "user-1",
        "task_id": "T1",
    }
