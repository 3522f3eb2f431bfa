# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule that
# drives the prediction poller and the schedule processor.
# =============================================================================

from app.config import get_settings

settings = get_settings()


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    task_acks_late = True

    # Only prefetch one task at a time
    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # A schedule batch may wait on several synchronous image generations
    task_time_limit = settings.REPLICATE_MAX_WAIT * max(settings.SCHEDULE_BATCH_SIZE, 1) + 60
    task_soft_time_limit = task_time_limit - 30

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "generation": {
            "exchange": "generation",
            "routing_key": "generation",
        },
    }

    task_routes = {
        "workers.tasks.process_completed_predictions": {"queue": "generation"},
        "workers.tasks.process_schedules": {"queue": "generation"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Beat Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        "process-completed-predictions": {
            "task": "workers.tasks.process_completed_predictions",
            "schedule": float(settings.POLL_SCHEDULE_SECONDS),
        },
        "process-schedules": {
            "task": "workers.tasks.process_schedules",
            "schedule": float(settings.POLL_SCHEDULE_SECONDS),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
