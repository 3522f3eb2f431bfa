# =============================================================================
# app/routers/predictions.py - Prediction Completion Endpoints
# =============================================================================
# - POST /predictions/process: run one poller sweep (manual trigger)
# - POST /predictions/webhook: Replicate "completed" webhook
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from app.dependencies import PollerDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/process")
def process_completed_predictions(poller: PollerDep):
    """
    Check all processing video/design content against Replicate.

    Completed predictions are copied into storage and their content and
    job rows finalized; failed ones are marked failed.
    """
    try:
        summary = poller.process_completed()
    except Exception as e:
        logger.exception(f"Error in process-completed-predictions: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": str(e),
                "details": "Check function logs for more information",
            },
        )

    return summary.to_dict()


@router.post("/webhook")
def prediction_webhook(
    poller: PollerDep,
    prediction: dict[str, Any] = Body(...),
):
    """
    Receive a Replicate prediction webhook.

    Safe to deliver more than once: only the first terminal payload for a
    prediction changes any rows.
    """
    try:
        summary = poller.apply_prediction(prediction)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    return summary.to_dict()
