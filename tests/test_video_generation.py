# =============================================================================
# tests/test_video_generation.py - Video Submission Tests
# =============================================================================
# Run with: pytest tests/test_video_generation.py -v
# =============================================================================

import pytest

from app.exceptions import InvalidFieldError, MissingFieldError, VideoGenerationError
from core.services.video_generation_service import parse_video_request


# =============================================================================
# Request Parsing
# =============================================================================

class TestParseVideoRequest:
    """Tests for parse_video_request."""

    def test_defaults(self, video_payload):
        request = parse_video_request(video_payload)

        assert request.mode == "standard"
        assert request.duration == 5
        assert request.negative_prompt is None

    def test_explicit_null_uses_default(self, video_payload):
        request = parse_video_request({**video_payload, "mode": None, "duration": None})

        assert request.mode == "standard"
        assert request.duration == 5

    @pytest.mark.parametrize("field", [
        "schedule_id", "generation_job_id", "prompt", "start_image", "user_id", "task_id",
    ])
    def test_each_required_field(self, video_payload, field):
        payload = dict(video_payload)
        del payload[field]

        with pytest.raises(MissingFieldError) as exc_info:
            parse_video_request(payload)

        assert exc_info.value.message == "Missing required fields"
        assert exc_info.value.fields == [field]

    def test_empty_string_counts_as_missing(self, video_payload):
        with pytest.raises(MissingFieldError):
            parse_video_request({**video_payload, "prompt": ""})

    def test_invalid_mode(self, video_payload):
        with pytest.raises(InvalidFieldError) as exc_info:
            parse_video_request({**video_payload, "mode": "ultra"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["field"] == "mode"
        assert exc_info.value.details["allowed"] == ["standard", "pro"]

    def test_invalid_duration(self, video_payload):
        with pytest.raises(InvalidFieldError) as exc_info:
            parse_video_request({**video_payload, "duration": 7})

        assert exc_info.value.details["field"] == "duration"


# =============================================================================
# Submission
# =============================================================================

class TestVideoSubmission:
    """Tests for VideoGenerationService.submit."""

    def test_missing_start_image_has_no_side_effects(self, video_service, video_payload, store, provider):
        del video_payload["start_image"]

        with pytest.raises(MissingFieldError):
            video_service.submit(video_payload)

        assert provider.created == []
        assert store.writes == []

    def test_creates_prediction_and_records(self, video_service, video_payload, store, provider, settings):
        store.jobs["J1"] = {"id": "J1", "status": "pending"}

        outcome = video_service.submit({**video_payload, "mode": "pro", "duration": 10})

        assert outcome.result == {
            "success": True,
            "prediction_id": "pred-video",
            "content_id": outcome.result["content_id"],
        }
        assert outcome.warnings == []

        version, model_input = provider.created[0]
        assert version == settings.REPLICATE_VIDEO_MODEL
        assert model_input == {
            "prompt": "a cat surfing a wave at sunset",
            "negative_prompt": "",
            "start_image": "https://img/start.png",
            "mode": "pro",
            "duration": 10,
        }

        job = store.jobs["J1"]
        assert job["status"] == "processing"
        assert job["external_job_id"] == "pred-video"
        assert "started_at" in job

        content = store.content[outcome.result["content_id"]]
        assert content["generation_status"] == "processing"
        assert content["content_type"] == "video"
        assert content["task_type"] == "video-generation"
        assert content["schedule_id"] == "S1"
        assert content["task_id"] == "T1"
        assert content["title"] == "Video: a cat surfing a wave at sunset..."
        assert content["metadata"]["prediction_id"] == "pred-video"
        assert content["metadata"]["generation_job_id"] == "J1"
        assert content["metadata"]["mode"] == "pro"
        assert content["metadata"]["duration"] == 10

    def test_prediction_without_id(self, video_service, video_payload, store, provider):
        provider.create_result = {"status": "starting"}

        with pytest.raises(VideoGenerationError) as exc_info:
            video_service.submit(video_payload)

        assert exc_info.value.message == "Failed to create prediction"
        assert store.writes == []

    def test_job_update_failure_is_warning(self, video_service, video_payload, store):
        store.failing.add("update_generation_job")

        outcome = video_service.submit(video_payload)

        assert outcome.result["success"] is True
        assert len(outcome.warnings) == 1
        assert len(store.content) == 1

    def test_content_insert_failure(self, video_service, video_payload, store):
        store.jobs["J1"] = {"id": "J1", "status": "pending"}
        store.failing.add("insert_generated_content")

        with pytest.raises(VideoGenerationError) as exc_info:
            video_service.submit(video_payload)

        assert exc_info.value.message == "Database error"
        assert exc_info.value.code == "CONTENT_INSERT_FAILED"
