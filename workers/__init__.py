# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and the periodic tasks that
# finish asynchronous generations and run due schedules.
#
# Components:
# - celery_app.py: Celery application configuration and beat schedule
# - tasks.py: Task definitions (prediction polling, schedule processing)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker with embedded beat
#   celery -A workers.celery_app worker --beat --loglevel=info
#
#   # Trigger a sweep by hand (from API or shell)
#   from workers.tasks import process_completed_predictions
#   result = process_completed_predictions.delay()
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
