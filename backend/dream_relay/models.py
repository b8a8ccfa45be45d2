"""Pydantic models for API requests and responses."""
from __future__ import annotations

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class PredictionInput(BaseModel):
    """Generation parameters accepted from the browser."""

    model_config = ConfigDict(extra="ignore")

    prompt: str = Field(..., min_length=1, description="Text prompt for the video")
    num_frames: Optional[int] = Field(default=None, description="Frame count; falls back to the default when falsy")
    fps: Optional[int] = Field(default=None, description="Frames per second; falls back to the default when falsy")


class PredictionRequest(BaseModel):
    """Body of ``POST /api/predictions``."""

    model_config = ConfigDict(extra="ignore")

    version: str = Field(..., min_length=1, description="Replicate model version id")
    input: PredictionInput

    def to_upstream(self, default_num_frames: int, default_fps: int) -> Dict[str, Any]:
        """Return the allow-listed payload sent to Replicate."""
        return {
            "version": self.version,
            "input": {
                "prompt": self.input.prompt,
                "num_frames": self.input.num_frames or default_num_frames,
                "fps": self.input.fps or default_fps,
            },
        }


class ErrorEnvelope(BaseModel):
    """Normalized error body returned on every failure path."""

    error: str
    userMessage: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Server is running"


class ClientConfig(BaseModel):
    """Runtime values exposed to the frontend."""

    defaultNumFrames: int
    defaultFps: int
    timeoutSeconds: float
    stuckAfterSeconds: float
