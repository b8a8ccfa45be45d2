"""Runtime config endpoint for frontend consumption."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..config import Settings
from ..deps import get_app_settings
from ..models import ClientConfig

router = APIRouter(tags=["config"])


@router.get("/config", response_model=ClientConfig)
async def get_config(settings: Settings = Depends(get_app_settings)) -> ClientConfig:
    """Expose non-sensitive generation defaults and timing limits."""
    return ClientConfig(
        defaultNumFrames=settings.DEFAULT_NUM_FRAMES,
        defaultFps=settings.DEFAULT_FPS,
        timeoutSeconds=settings.UPSTREAM_TIMEOUT_SECONDS,
        stuckAfterSeconds=settings.STUCK_AFTER_SECONDS,
    )
