# =============================================================================
# core/services/prediction_service.py - Completion Poller / Callback Handler
# =============================================================================
# Moves asynchronous generations (video, design) to a terminal state once
# Replicate reports on their prediction. Two entry points share one
# transition routine:
# - process_completed(): periodic sweep over "processing" content rows
# - apply_prediction(): webhook callback for a single prediction
#
# Exactly-once per prediction: the content row is only updated while its
# generation_status is still "processing", and the matching jobs are only
# touched by the caller that won that update. A second sweep (or a webhook
# racing a sweep) sees no matching row and skips.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from app.exceptions import StorageDownloadError, StorageUploadError
from core.models import (
    ACTIVE_JOB_STATUSES,
    POLLED_CONTENT_TYPES,
    ContentStatus,
    ContentType,
    JobStatus,
    PollSummary,
)
from core.services.image_generation_service import extract_output_url
from core.services.storage_service import StorageService, generate_storage_path
from lib.replicate_client import ReplicateClient
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Transition results
COMPLETED = "completed"
FAILED = "failed"
PENDING = "pending"
SKIPPED = "skipped"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def prediction_error_message(prediction: dict[str, Any]) -> str:
    """Human readable error of a failed/canceled prediction."""
    error = prediction.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if error:
        return str(error)
    if prediction.get("status") == "canceled":
        return "Generation canceled"
    return "Generation failed"


class PredictionPoller:
    """
    Completion poller for asynchronous predictions.

    Example:
        poller = PredictionPoller(store, replicate, storage)
        summary = poller.process_completed()
        print(summary.completed, summary.failed)
    """

    def __init__(
        self,
        store: SupabaseClient,
        provider: ReplicateClient,
        storage: StorageService,
    ):
        self._store = store
        self._provider = provider
        self._storage = storage

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def process_completed(self) -> PollSummary:
        """
        Check every processing content row against Replicate.

        Provider lookups that fail leave the row untouched for the next
        sweep and are reported as warnings.
        """
        rows = self._store.fetch_processing_content(POLLED_CONTENT_TYPES)
        summary = PollSummary(total_checked=len(rows))

        if not rows:
            logger.info("No processing content found")
            return summary

        logger.info(f"Found {len(rows)} processing content item(s)")

        for row in rows:
            prediction_id = (row.get("metadata") or {}).get("prediction_id")
            if not prediction_id:
                logger.warning(f"No prediction ID found for content {row['id']}")
                summary.skipped += 1
                continue

            try:
                prediction = self._provider.get_prediction(prediction_id)
                result = self._apply(row, prediction, summary.warnings)
            except Exception as e:
                logger.error(f"Error processing content {row['id']}: {e}")
                summary.warnings.append(f"Content {row['id']} (prediction {prediction_id}): {e}")
                summary.skipped += 1
                continue

            self._tally(summary, result)

        logger.info(
            f"Processing complete: {summary.completed} completed, "
            f"{summary.failed} failed, {summary.pending} pending"
        )
        return summary

    def apply_prediction(self, prediction: dict[str, Any]) -> PollSummary:
        """
        Apply a single prediction payload (Replicate webhook body).

        Unknown predictions and rows that already left "processing" are
        counted as skipped.
        """
        prediction_id = prediction.get("id")
        if not prediction_id:
            raise ValueError("Prediction payload has no id")

        summary = PollSummary(total_checked=1)
        row = self._store.fetch_content_by_prediction_id(prediction_id)

        if row is None or row.get("generation_status") != ContentStatus.PROCESSING.value:
            logger.info(f"Ignoring callback for prediction {prediction_id}: nothing to update")
            summary.skipped = 1
            return summary

        self._tally(summary, self._apply(row, prediction, summary.warnings))
        return summary

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    @staticmethod
    def _tally(summary: PollSummary, result: str) -> None:
        if result == COMPLETED:
            summary.completed += 1
        elif result == FAILED:
            summary.failed += 1
        elif result == PENDING:
            summary.pending += 1
        else:
            summary.skipped += 1

    def _apply(
        self,
        row: dict[str, Any],
        prediction: dict[str, Any],
        warnings: list[str],
    ) -> str:
        prediction_id = prediction["id"]
        status = prediction.get("status")
        logger.info(f"Prediction {prediction_id} status: {status}")

        if status == "succeeded":
            try:
                output_url = extract_output_url(prediction.get("output"))
            except ValueError:
                logger.error(f"No output URL for prediction {prediction_id}")
                return self._fail(row, prediction_id, "No output URL from Replicate", warnings)

            try:
                path = self._storage_path(row)
                public_url = self._storage.store_remote_file(output_url, path)
            except (StorageDownloadError, StorageUploadError) as e:
                return self._fail(row, prediction_id, f"Download/storage failed: {e.message}", warnings)
            except ValueError as e:
                return self._fail(row, prediction_id, f"Download/storage failed: {e}", warnings)

            return self._complete(row, prediction, output_url, public_url, path, warnings)

        if status in ("failed", "canceled"):
            error = prediction_error_message(prediction)
            logger.error(f"Prediction {prediction_id} failed: {error}")
            return self._fail(row, prediction_id, error, warnings)

        return PENDING

    def _storage_path(self, row: dict[str, Any]) -> str:
        schedule = row.get("schedules") or {}
        project_id = schedule.get("task_id") or row.get("task_id") or "default-task"

        if row.get("content_type") == ContentType.VIDEO.value:
            project_type = "video-generation"
        else:
            project_type = row.get("task_type") or "image-generation"

        return generate_storage_path(
            user_id=row.get("user_id") or "anonymous",
            project_id=project_id,
            project_type=project_type,
        )

    def _complete(
        self,
        row: dict[str, Any],
        prediction: dict[str, Any],
        output_url: str,
        public_url: str,
        path: str,
        warnings: list[str],
    ) -> str:
        prediction_id = prediction["id"]
        metadata = dict(row.get("metadata") or {})
        predict_time = (prediction.get("metrics") or {}).get("predict_time")
        metadata.update({
            "replicate_output_url": output_url,
            "generation_time_seconds": metadata.get("generation_time_seconds") or predict_time or 0,
            "prediction_id": prediction_id,
        })

        updated = self._store.update_generated_content(
            row["id"],
            {
                "generation_status": ContentStatus.COMPLETED.value,
                "content_url": public_url,
                "storage_path": path,
                "metadata": metadata,
            },
            only_status=ContentStatus.PROCESSING.value,
        )
        if updated is None:
            logger.info(f"Content {row['id']} already finalized elsewhere")
            return SKIPPED

        self._update_jobs(prediction_id, {
            "status": JobStatus.COMPLETED.value,
            "images_generated": 1,
            "completed_at": _now(),
        }, warnings)

        logger.info(f"Successfully processed content: {row['id']}")
        return COMPLETED

    def _fail(
        self,
        row: dict[str, Any],
        prediction_id: str,
        error: str,
        warnings: list[str],
    ) -> str:
        metadata = dict(row.get("metadata") or {})
        metadata["error_message"] = error

        updated = self._store.update_generated_content(
            row["id"],
            {
                "generation_status": ContentStatus.FAILED.value,
                "metadata": metadata,
            },
            only_status=ContentStatus.PROCESSING.value,
        )
        if updated is None:
            logger.info(f"Content {row['id']} already finalized elsewhere")
            return SKIPPED

        self._update_jobs(prediction_id, {
            "status": JobStatus.FAILED.value,
            "error_message": error,
            "completed_at": _now(),
        }, warnings)
        return FAILED

    def _update_jobs(
        self,
        prediction_id: str,
        data: dict[str, Any],
        warnings: list[str],
    ) -> None:
        try:
            self._store.update_jobs_by_external_id(
                prediction_id,
                data,
                only_statuses=ACTIVE_JOB_STATUSES,
            )
        except Exception as e:
            logger.error(f"Failed to update jobs for prediction {prediction_id}: {e}")
            warnings.append(f"Failed to update jobs for prediction {prediction_id}: {e}")
