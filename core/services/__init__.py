# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import StorageService, generate_storage_path
from .image_generation_service import ImageGenerationService
from .video_generation_service import VideoGenerationService
from .prediction_service import PredictionPoller
from .schedule_service import ScheduleProcessor

__all__ = [
    "StorageService",
    "generate_storage_path",
    "ImageGenerationService",
    "VideoGenerationService",
    "PredictionPoller",
    "ScheduleProcessor",
]
