# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Periodic background tasks:
# - process_completed_predictions: finish video/design content whose
#   Replicate prediction reached a terminal state
# - process_schedules: enqueue due schedules and run pending image jobs
#
# Both run on the beat schedule in workers/config.py and return the same
# summary dict the matching HTTP endpoint returns.
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from app.config import get_settings
from core.services import (
    ImageGenerationService,
    PredictionPoller,
    ScheduleProcessor,
    StorageService,
)
from lib.replicate_client import ReplicateClient
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="workers.tasks.process_completed_predictions")
def process_completed_predictions(self) -> dict[str, Any]:
    """
    Run one sweep of the prediction poller.

    Returns:
        PollSummary as a dict (completed, failed, pending, total_checked, ...)
    """
    settings = get_settings()
    store = SupabaseClient.from_settings(settings)
    provider = ReplicateClient.from_settings(settings)
    storage = StorageService(store, settings)

    try:
        summary = PredictionPoller(store, provider, storage).process_completed()
    finally:
        storage.close()
        provider.close()

    for warning in summary.warnings:
        logger.warning(warning)
    return summary.to_dict()


@shared_task(bind=True, name="workers.tasks.process_schedules")
def process_schedules(self) -> dict[str, Any]:
    """
    Run one pass of the schedule processor.

    Returns:
        ScheduleRunSummary as a dict (processed, total_jobs, results)
    """
    settings = get_settings()
    store = SupabaseClient.from_settings(settings)
    provider = ReplicateClient.from_settings(settings)
    storage = StorageService(store, settings)

    try:
        image_service = ImageGenerationService(store, provider, storage, settings)
        summary = ScheduleProcessor(store, image_service, settings).run()
    finally:
        storage.close()
        provider.close()

    for warning in summary.warnings:
        logger.warning(warning)
    return summary.to_dict()
