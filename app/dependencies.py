# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(); tests swap them
# through app.dependency_overrides.
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import Settings, get_settings
from core.services import (
    ImageGenerationService,
    PredictionPoller,
    ScheduleProcessor,
    StorageService,
    VideoGenerationService,
)
from lib.replicate_client import ReplicateClient
from lib.supabase_client import SupabaseClient


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Process-wide Supabase wrapper (the underlying client is created lazily)."""
    return SupabaseClient.from_settings(get_settings())


@lru_cache
def get_replicate_client() -> ReplicateClient:
    """Process-wide Replicate client."""
    return ReplicateClient.from_settings(get_settings())


@lru_cache
def get_storage_service() -> StorageService:
    """Process-wide storage service (holds its own download client)."""
    return StorageService(get_supabase_client(), get_settings())


SettingsDep = Annotated[Settings, Depends(get_settings)]
SupabaseDep = Annotated[SupabaseClient, Depends(get_supabase_client)]
ReplicateDep = Annotated[ReplicateClient, Depends(get_replicate_client)]
StorageDep = Annotated[StorageService, Depends(get_storage_service)]


def get_image_service(
    settings: SettingsDep,
    store: SupabaseDep,
    provider: ReplicateDep,
    storage: StorageDep,
) -> ImageGenerationService:
    return ImageGenerationService(store, provider, storage, settings)


def get_video_service(
    settings: SettingsDep,
    store: SupabaseDep,
    provider: ReplicateDep,
) -> VideoGenerationService:
    return VideoGenerationService(store, provider, settings)


def get_prediction_poller(
    store: SupabaseDep,
    provider: ReplicateDep,
    storage: StorageDep,
) -> PredictionPoller:
    return PredictionPoller(store, provider, storage)


def get_schedule_processor(
    settings: SettingsDep,
    store: SupabaseDep,
    image_service: Annotated[ImageGenerationService, Depends(get_image_service)],
) -> ScheduleProcessor:
    return ScheduleProcessor(store, image_service, settings)


ImageServiceDep = Annotated[ImageGenerationService, Depends(get_image_service)]
VideoServiceDep = Annotated[VideoGenerationService, Depends(get_video_service)]
PollerDep = Annotated[PredictionPoller, Depends(get_prediction_poller)]
ScheduleProcessorDep = Annotated[ScheduleProcessor, Depends(get_schedule_processor)]
