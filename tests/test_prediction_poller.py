# =============================================================================
# tests/test_prediction_poller.py - Completion Poller Tests
# =============================================================================
# Run with: pytest tests/test_prediction_poller.py -v
# =============================================================================

import pytest

from app.exceptions import StorageDownloadError
from core.services.prediction_service import prediction_error_message


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def processing_video(store):
    """A processing video row, its job, and the schedule join."""
    store.jobs["J1"] = {
        "id": "J1",
        "status": "processing",
        "external_job_id": "pred-1",
    }
    store.content["C1"] = {
        "id": "C1",
        "user_id": "user-1",
        "task_id": "T1",
        "task_type": "video-generation",
        "content_type": "video",
        "generation_status": "processing",
        "metadata": {"prediction_id": "pred-1", "mode": "standard"},
        "schedules": {"id": "S1", "task_id": "T-sched", "name": "Daily"},
    }
    return store.content["C1"]


def succeeded(prediction_id="pred-1", output="https://replicate.delivery/video.mp4"):
    return {
        "id": prediction_id,
        "status": "succeeded",
        "output": output,
        "metrics": {"predict_time": 42.5},
    }


# =============================================================================
# Sweep
# =============================================================================

class TestProcessCompleted:
    """Tests for PredictionPoller.process_completed."""

    def test_nothing_to_do(self, poller):
        summary = poller.process_completed()

        assert summary.total_checked == 0
        assert summary.to_dict()["message"] == "Processed 0 predictions"

    def test_succeeded(self, poller, provider, store, storage, processing_video):
        provider.predictions["pred-1"] = succeeded()

        summary = poller.process_completed()

        assert summary.completed == 1
        assert summary.total_checked == 1

        url, path = storage.stored[0]
        assert url == "https://replicate.delivery/video.mp4"
        assert path.startswith("user-1/video-generation/T-sched/video_")
        assert path.endswith(".mp4")

        content = store.content["C1"]
        assert content["generation_status"] == "completed"
        assert content["storage_path"] == path
        assert content["content_url"] == f"https://storage.test/generated-images/{path}"
        assert content["metadata"]["replicate_output_url"] == url
        assert content["metadata"]["generation_time_seconds"] == 42.5
        assert content["metadata"]["mode"] == "standard"

        job = store.jobs["J1"]
        assert job["status"] == "completed"
        assert job["images_generated"] == 1
        assert "completed_at" in job

    def test_failed(self, poller, provider, store, processing_video):
        provider.predictions["pred-1"] = {"id": "pred-1", "status": "failed", "error": "GPU exploded"}

        summary = poller.process_completed()

        assert summary.failed == 1
        assert store.content["C1"]["generation_status"] == "failed"
        assert store.content["C1"]["metadata"]["error_message"] == "GPU exploded"
        assert store.jobs["J1"]["status"] == "failed"
        assert store.jobs["J1"]["error_message"] == "GPU exploded"

    def test_still_running(self, poller, provider, store, storage, processing_video):
        provider.predictions["pred-1"] = {"id": "pred-1", "status": "processing"}

        summary = poller.process_completed()

        assert summary.pending == 1
        assert store.content["C1"]["generation_status"] == "processing"
        assert store.jobs["J1"]["status"] == "processing"
        assert storage.stored == []

    def test_missing_output_fails(self, poller, provider, store, processing_video):
        provider.predictions["pred-1"] = succeeded(output=None)

        summary = poller.process_completed()

        assert summary.failed == 1
        assert store.content["C1"]["metadata"]["error_message"] == "No output URL from Replicate"

    def test_storage_error_fails(self, poller, provider, store, storage, processing_video):
        provider.predictions["pred-1"] = succeeded()
        storage.error = StorageDownloadError("https://x", "404 Not Found")

        summary = poller.process_completed()

        assert summary.failed == 1
        assert store.content["C1"]["metadata"]["error_message"].startswith("Download/storage failed:")
        assert store.jobs["J1"]["status"] == "failed"

    def test_lookup_error_leaves_row(self, poller, store, processing_video):
        """No canned prediction means the fake provider raises."""
        summary = poller.process_completed()

        assert summary.skipped == 1
        assert len(summary.warnings) == 1
        assert store.content["C1"]["generation_status"] == "processing"
        assert store.jobs["J1"]["status"] == "processing"

    def test_runs_twice_transitions_once(self, poller, provider, store, storage, processing_video):
        provider.predictions["pred-1"] = succeeded()

        first = poller.process_completed()
        second = poller.process_completed()

        assert first.completed == 1
        assert second.total_checked == 0
        assert len(storage.stored) == 1

    def test_job_update_failure_is_warning(self, poller, provider, store, processing_video):
        provider.predictions["pred-1"] = succeeded()
        store.failing.add("update_jobs_by_external_id")

        summary = poller.process_completed()

        assert summary.completed == 1
        assert store.content["C1"]["generation_status"] == "completed"
        assert len(summary.warnings) == 1

    def test_terminal_jobs_untouched(self, poller, provider, store, processing_video):
        store.jobs["J1"]["status"] = "failed"
        provider.predictions["pred-1"] = succeeded()

        poller.process_completed()

        assert store.jobs["J1"]["status"] == "failed"

    def test_design_uses_task_type(self, poller, provider, store, storage):
        store.content["C2"] = {
            "id": "C2",
            "user_id": "user-2",
            "task_id": "T2",
            "task_type": "print-on-shirt",
            "content_type": "design",
            "generation_status": "processing",
            "metadata": {"prediction_id": "pred-2"},
            "schedules": None,
        }
        provider.predictions["pred-2"] = succeeded("pred-2", ["https://replicate.delivery/d.png"])

        summary = poller.process_completed()

        assert summary.completed == 1
        path = storage.stored[0][1]
        assert path.startswith("user-2/print-on-shirt/T2/design_")
        assert path.endswith(".png")


# =============================================================================
# Webhook
# =============================================================================

class TestApplyPrediction:
    """Tests for PredictionPoller.apply_prediction."""

    def test_applies_terminal_payload(self, poller, store, provider, processing_video):
        summary = poller.apply_prediction(succeeded())

        assert summary.completed == 1
        assert store.content["C1"]["generation_status"] == "completed"
        assert provider.lookups == []

    def test_duplicate_delivery_skipped(self, poller, store, storage, processing_video):
        poller.apply_prediction(succeeded())
        summary = poller.apply_prediction(succeeded())

        assert summary.skipped == 1
        assert len(storage.stored) == 1

    def test_unknown_prediction(self, poller):
        summary = poller.apply_prediction(succeeded("unknown"))

        assert summary.skipped == 1

    def test_missing_id(self, poller):
        with pytest.raises(ValueError):
            poller.apply_prediction({"status": "succeeded"})


# =============================================================================
# Error Messages
# =============================================================================

class TestPredictionErrorMessage:

    def test_string_error(self):
        assert prediction_error_message({"status": "failed", "error": "bad"}) == "bad"

    def test_dict_error(self):
        assert prediction_error_message({"status": "failed", "error": {"message": "bad"}}) == "bad"

    def test_canceled(self):
        assert prediction_error_message({"status": "canceled"}) == "Generation canceled"

    def test_default(self):
        assert prediction_error_message({"status": "failed"}) == "Generation failed"
