# =============================================================================
# lib/replicate_client.py - Replicate HTTP Client
# =============================================================================
# Minimal wrapper around the Replicate predictions API:
# - run(): create a prediction for an official model and wait for it
#   (used by the synchronous image path)
# - create_prediction(): fire-and-forget prediction for a model version
#   (used by the video path; completion is picked up by the poller)
# - get_prediction(): status lookup for the poller
#
# Usage:
#   client = ReplicateClient.from_settings(settings)
#   prediction = client.run("black-forest-labs/flux-kontext-max", {"prompt": "a cat"})
#   print(prediction["output"])
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("succeeded", "failed", "canceled")


class ReplicateError(Exception):
    """Non-success response or failed prediction from Replicate."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        prediction_id: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.prediction_id = prediction_id


class ReplicateClient:
    """
    Blocking Replicate API client built on httpx.

    Every request carries an explicit timeout, and run() gives up after
    max_wait seconds of polling.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.replicate.com",
        timeout: float = 120.0,
        poll_interval: float = 1.5,
        max_wait: float = 300.0,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not api_token:
            raise ValueError("REPLICATE_API_TOKEN is not set")

        self._api_token = api_token
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._sleep = sleep
        self._http = http_client or httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> ReplicateClient:
        return cls(
            api_token=settings.REPLICATE_API_TOKEN,
            base_url=settings.REPLICATE_BASE_URL,
            timeout=settings.REPLICATE_TIMEOUT,
            poll_interval=settings.REPLICATE_POLL_INTERVAL,
            max_wait=settings.REPLICATE_MAX_WAIT,
        )

    def close(self) -> None:
        self._http.close()

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = self._http.request(
                method,
                path,
                json=json,
                headers=self._headers(headers),
            )
        except httpx.HTTPError as e:
            raise ReplicateError(f"Replicate request failed: {e}")

        if response.status_code >= 400:
            logger.error(f"Replicate API error: {response.status_code} {response.text[:300]}")
            raise ReplicateError(
                f"Replicate API error: {response.status_code} {response.text[:300]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise ReplicateError(
                f"Replicate returned non-JSON body: {response.text[:300]}",
                status_code=response.status_code,
            )

    # -------------------------------------------------------------------------
    # Predictions
    # -------------------------------------------------------------------------

    def create_prediction(
        self,
        version: str,
        input: dict[str, Any],
        webhook: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a prediction for a model version and return immediately.

        The returned dict carries the prediction "id" used to correlate
        later status checks or webhook callbacks.
        """
        body: dict[str, Any] = {"version": version, "input": input}
        if webhook:
            body["webhook"] = webhook
            body["webhook_events_filter"] = ["completed"]

        logger.info(f"Creating Replicate prediction for {version}")
        return self._request("POST", "/v1/predictions", json=body)

    def create_model_prediction(
        self,
        model: str,
        input: dict[str, Any],
        wait: bool = True,
    ) -> dict[str, Any]:
        """
        Create a prediction against an official model ("owner/name").

        With wait=True Replicate holds the request open until the prediction
        finishes or its own sync window elapses.
        """
        if ":" in model:
            # "owner/name:version" pins a version
            return self.create_prediction(model.split(":", 1)[1], input)

        return self._request(
            "POST",
            f"/v1/models/{model}/predictions",
            json={"input": input},
            headers={"Prefer": "wait"} if wait else None,
        )

    def get_prediction(self, prediction_id: str) -> dict[str, Any]:
        """Fetch a prediction's current state."""
        return self._request("GET", f"/v1/predictions/{prediction_id}")

    def wait(self, prediction: dict[str, Any]) -> dict[str, Any]:
        """Poll a prediction until it reaches a terminal status."""
        waited = 0.0
        while prediction.get("status") not in TERMINAL_STATUSES:
            if waited >= self._max_wait:
                raise ReplicateError(
                    f"Timed out after {self._max_wait:.0f}s waiting for prediction",
                    prediction_id=prediction.get("id"),
                )
            self._sleep(self._poll_interval)
            waited += self._poll_interval
            prediction = self.get_prediction(prediction["id"])
            logger.debug(f"Prediction {prediction.get('id')} status: {prediction.get('status')}")

        return prediction

    def run(self, model: str, input: dict[str, Any]) -> dict[str, Any]:
        """
        Run a model to completion.

        Returns:
            The succeeded prediction dict (with "id" and "output")

        Raises:
            ReplicateError: On HTTP errors, timeouts, or a failed/canceled prediction
        """
        prediction = self.wait(self.create_model_prediction(model, input))

        if prediction.get("status") != "succeeded":
            error = prediction.get("error") or f"Prediction {prediction.get('status')}"
            raise ReplicateError(
                f"Replicate prediction failed: {error}",
                prediction_id=prediction.get("id"),
            )

        return prediction
