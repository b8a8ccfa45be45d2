"""Health endpoint."""
from __future__ import annotations

from fastapi import APIRouter

from ..models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe endpoint."""
    return HealthResponse()
