# =============================================================================
# app/routers/schedules.py - Schedule Processor Endpoint
# =============================================================================

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.dependencies import ScheduleProcessorDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/process")
def process_schedules(processor: ScheduleProcessorDep):
    """
    Enqueue due schedules and generate images for a batch of pending jobs.

    Normally driven by Celery beat; exposed for manual triggering.
    """
    try:
        summary = processor.run()
    except Exception as e:
        logger.exception(f"Error in schedule-processor: {e}")
        return JSONResponse(status_code=500, content={"error": str(e), "success": False})

    return summary.to_dict()
