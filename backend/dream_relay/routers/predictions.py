"""Predictions router: thin HTTP layer over ReplicateService.

Every failure is converted here into an ``{error, userMessage}`` envelope;
nothing raised while relaying a request escapes to the server.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..deps import get_replicate_service
from ..exceptions import RelayError
from ..services.replicate import CREATE_FAILED_MESSAGE, STATUS_FAILED_MESSAGE, ReplicateService

router = APIRouter(prefix="/predictions", tags=["predictions"])  # mounted under /api
logger = logging.getLogger(__name__)


def _error_response(exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


@router.post("")
@router.post("/", include_in_schema=False)
async def create_prediction(
    request: Request,
    service: ReplicateService = Depends(get_replicate_service),
):
    """Start a generation job. Expects JSON { version, input: { prompt, num_frames?, fps? } }."""
    body = await _read_json(request)
    try:
        return await service.create_prediction(body)
    except RelayError as exc:
        logger.error("Error creating prediction: %s", exc.error)
        return _error_response(exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error creating prediction")
        return JSONResponse(status_code=500, content={"error": str(exc), "userMessage": CREATE_FAILED_MESSAGE})


@router.get("/{prediction_id}")
async def get_prediction(
    prediction_id: str,
    service: ReplicateService = Depends(get_replicate_service),
):
    """Return the provider's prediction object, or a stuck/error envelope."""
    return await _relay_status(service, prediction_id)


@router.get("/", include_in_schema=False)
async def get_prediction_without_id(service: ReplicateService = Depends(get_replicate_service)):
    return await _relay_status(service, "")


async def _relay_status(service: ReplicateService, prediction_id: str):
    try:
        return await service.get_prediction(prediction_id)
    except RelayError as exc:
        logger.error("Error checking prediction status: %s", exc.error)
        return _error_response(exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error checking prediction status")
        return JSONResponse(status_code=500, content={"error": str(exc), "userMessage": STATUS_FAILED_MESSAGE})
