"""Replicate service: create predictions and poll their status.

Async implementation using httpx so the FastAPI event loop is not blocked
while waiting on the provider. Every call runs under a hard deadline and is
cancelled when it expires. There are no retries: each failure is reported
once and the browser decides whether to call again.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..exceptions import (
    INVALID_API_KEY_MESSAGE,
    MissingPredictionIdError,
    PayloadValidationError,
    StalePredictionError,
    UpstreamError,
    UpstreamProtocolError,
    UpstreamTimeoutError,
)
from ..models import PredictionRequest
from ..utils.timestamps import seconds_since

logger = logging.getLogger(__name__)

STARTING = "starting"
DOT_SEGMENTS = frozenset({".", ".."})

CREATE_FAILED_MESSAGE = "Failed to generate dream. Please try again later."
STATUS_FAILED_MESSAGE = "Failed to check dream status. Please try again."
TIMEOUT_ERROR = "Request timed out. Please try again."


def _is_invalid_token(status_code: int, detail: str | None) -> bool:
    if status_code == 401:
        return True
    return bool(detail) and "invalid api token" in detail.lower()


def _detail(data: Any) -> str | None:
    if isinstance(data, dict):
        detail = data.get("detail")
        if isinstance(detail, str) and detail:
            return detail
        if detail:
            return json.dumps(detail)
    return None


class ReplicateService:
    """Stateless relay to the Replicate predictions API.

    ``transport`` is handed to every ``httpx.AsyncClient`` the service opens,
    which lets tests swap the network for ``httpx.MockTransport``.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Token {self.settings.REPLICATE_API_KEY}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def build_payload(self, body: Any) -> Dict[str, Any]:
        """Validate a browser body and return the allow-listed upstream payload.

        Raises PayloadValidationError when ``version`` or ``input.prompt`` is
        missing or empty.
        """
        if not isinstance(body, dict):
            raise PayloadValidationError(
                "Invalid request body: missing required fields",
                "Please provide a model version and a prompt.",
            )
        try:
            request = PredictionRequest.model_validate(body)
        except ValidationError as exc:
            logger.info("Rejected prediction body: %s", exc.errors(include_url=False))
            raise PayloadValidationError(
                "Invalid request body: missing required fields",
                "Please provide a model version and a prompt.",
            ) from exc
        return request.to_upstream(self.settings.DEFAULT_NUM_FRAMES, self.settings.DEFAULT_FPS)

    async def _send(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Issue one request, cancelled after UPSTREAM_TIMEOUT_SECONDS.

        The client is closed on every exit path, including cancellation.
        """
        deadline = self.settings.UPSTREAM_TIMEOUT_SECONDS

        async def _call() -> httpx.Response:
            async with httpx.AsyncClient(timeout=httpx.Timeout(deadline), transport=self.transport) as client:
                return await client.request(method, url, headers=self._headers(), json=payload)

        try:
            return await asyncio.wait_for(_call(), timeout=deadline)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("%s %s timed out after %ss", method, url, deadline)
            raise UpstreamTimeoutError(TIMEOUT_ERROR) from exc

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            logger.error("Replicate returned non-JSON body (status %s): %.200s", resp.status_code, resp.text)
            return None

    async def create_prediction(self, body: Any) -> Dict[str, Any]:
        """Create a prediction and return Replicate's job object verbatim."""
        payload = self.build_payload(body)
        logger.info("Creating prediction for version %s", payload["version"])

        try:
            resp = await self._send("POST", self.settings.predictions_url, payload)
        except UpstreamTimeoutError as exc:
            exc.user_message = "Generating your dream timed out. Please try again."
            raise

        data = self._json(resp)
        logger.debug("Replicate create response: %s", data)

        if not resp.is_success:
            logger.error("Replicate API error (%s): %s", resp.status_code, data)
            detail = _detail(data)
            if _is_invalid_token(resp.status_code, detail):
                message = INVALID_API_KEY_MESSAGE
            else:
                message = detail or "Failed to create prediction"
            raise UpstreamError(message, message, status_code=resp.status_code)

        if not isinstance(data, dict) or not data.get("id"):
            logger.error("No prediction ID in response: %s", data)
            raise UpstreamProtocolError(
                "Invalid API response: missing prediction ID",
                "Failed to start generation. Please try again.",
            )
        return data

    async def get_prediction(self, prediction_id: str | None) -> Dict[str, Any]:
        """Fetch a prediction's current state.

        A prediction still ``starting`` more than STUCK_AFTER_SECONDS after its
        ``created_at`` is reported as stuck instead of being passed through.
        """
        if not prediction_id or not prediction_id.strip():
            raise MissingPredictionIdError("Missing prediction ID", STATUS_FAILED_MESSAGE)
        prediction_id = prediction_id.strip()
        logger.info("Checking prediction status for ID: %s", prediction_id)

        try:
            resp = await self._send("GET", self.prediction_url(prediction_id))
        except UpstreamTimeoutError as exc:
            exc.user_message = "Checking your dream status timed out. Please try again."
            raise

        data = self._json(resp)
        logger.debug("Replicate status response: %s", data)

        if not resp.is_success:
            logger.error("Replicate API error (%s): %s", resp.status_code, data)
            detail = _detail(data)
            if _is_invalid_token(resp.status_code, detail):
                raise UpstreamError(INVALID_API_KEY_MESSAGE, INVALID_API_KEY_MESSAGE, status_code=resp.status_code)
            raise UpstreamError(
                detail or "Failed to get prediction status",
                STATUS_FAILED_MESSAGE,
                status_code=resp.status_code,
            )

        if not isinstance(data, dict):
            raise UpstreamProtocolError("Invalid API response: expected a prediction object", STATUS_FAILED_MESSAGE)

        if self.is_stuck(data):
            logger.warning("Prediction %s stuck in starting state since %s", prediction_id, data.get("created_at"))
            raise StalePredictionError(
                "Prediction stuck in starting state",
                "Generation is taking too long. Please try again.",
            )
        return data

    def prediction_url(self, prediction_id: str) -> str:
        """Status URL for one prediction; the id is always a single path segment."""
        if prediction_id in DOT_SEGMENTS:
            raise PayloadValidationError(f"Invalid prediction ID: {prediction_id!r}", STATUS_FAILED_MESSAGE)
        return f"{self.settings.predictions_url}/{quote(prediction_id, safe='')}"

    def is_stuck(self, prediction: Dict[str, Any]) -> bool:
        if prediction.get("status") != STARTING:
            return False
        elapsed = seconds_since(prediction.get("created_at"))
        return elapsed is not None and elapsed > self.settings.STUCK_AFTER_SECONDS
