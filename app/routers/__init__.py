# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - generation.py: Image and video submission endpoints
# - predictions.py: Completion poller trigger and Replicate webhook
# - schedules.py: Schedule processor trigger
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import generation
from . import predictions
from . import schedules

__all__ = [
    "health",
    "generation",
    "predictions",
    "schedules",
]
