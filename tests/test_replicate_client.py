# =============================================================================
# tests/test_replicate_client.py - Replicate Client Tests
# =============================================================================
# Requests are answered by httpx.MockTransport; nothing leaves the process.
#
# Run with: pytest tests/test_replicate_client.py -v
# =============================================================================

import json

import httpx
import pytest

from lib.replicate_client import ReplicateClient, ReplicateError


def make_client(handler, **kwargs):
    http = httpx.Client(
        base_url="https://api.replicate.com",
        transport=httpx.MockTransport(handler),
    )
    kwargs.setdefault("sleep", lambda seconds: None)
    return ReplicateClient("r8_test", http_client=http, **kwargs)


class TestConstruction:

    def test_requires_token(self):
        with pytest.raises(ValueError):
            ReplicateClient("")

    def test_from_settings(self, settings):
        client = ReplicateClient.from_settings(settings)
        client.close()


class TestCreatePrediction:
    """Tests for create_prediction / create_model_prediction."""

    def test_version_prediction(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "p1", "status": "starting"})

        prediction = make_client(handler).create_prediction("abc123", {"prompt": "x"})

        assert prediction["id"] == "p1"
        assert seen["path"] == "/v1/predictions"
        assert seen["auth"] == "Bearer r8_test"
        assert seen["body"] == {"version": "abc123", "input": {"prompt": "x"}}

    def test_webhook(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "p1"})

        make_client(handler).create_prediction("abc", {}, webhook="https://hook")

        assert seen["body"]["webhook"] == "https://hook"
        assert seen["body"]["webhook_events_filter"] == ["completed"]

    def test_model_prediction_waits(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["prefer"] = request.headers.get("Prefer")
            return httpx.Response(201, json={"id": "p1", "status": "succeeded"})

        make_client(handler).create_model_prediction("owner/model", {"prompt": "x"})

        assert seen["path"] == "/v1/models/owner/model/predictions"
        assert seen["prefer"] == "wait"

    def test_pinned_version_uses_predictions_endpoint(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "p1"})

        make_client(handler).create_model_prediction("owner/model:v42", {})

        assert seen["path"] == "/v1/predictions"
        assert seen["body"]["version"] == "v42"

    def test_http_error(self):
        client = make_client(lambda request: httpx.Response(422, text="bad input"))

        with pytest.raises(ReplicateError) as exc_info:
            client.create_prediction("v", {})

        assert exc_info.value.status_code == 422
        assert "422" in exc_info.value.message

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        with pytest.raises(ReplicateError):
            make_client(handler).get_prediction("p1")


class TestRun:
    """Tests for run / wait."""

    def test_polls_until_succeeded(self):
        states = iter(["processing", "succeeded"])

        def handler(request):
            if request.method == "POST":
                return httpx.Response(201, json={"id": "p1", "status": "starting"})
            status = next(states)
            body = {"id": "p1", "status": status}
            if status == "succeeded":
                body["output"] = ["https://out.png"]
            return httpx.Response(200, json=body)

        prediction = make_client(handler).run("owner/model", {})

        assert prediction["output"] == ["https://out.png"]

    def test_failed_prediction(self):
        def handler(request):
            return httpx.Response(201, json={"id": "p1", "status": "failed", "error": "NSFW"})

        with pytest.raises(ReplicateError) as exc_info:
            make_client(handler).run("owner/model", {})

        assert exc_info.value.message == "Replicate prediction failed: NSFW"
        assert exc_info.value.prediction_id == "p1"

    def test_times_out(self):
        def handler(request):
            return httpx.Response(200, json={"id": "p1", "status": "processing"})

        client = make_client(handler, poll_interval=1.0, max_wait=3.0)

        with pytest.raises(ReplicateError, match="Timed out"):
            client.run("owner/model", {})
