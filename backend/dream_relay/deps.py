"""FastAPI dependencies."""
from __future__ import annotations

from fastapi import Request

from .config import Settings
from .services.replicate import ReplicateService


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


def get_replicate_service(request: Request) -> ReplicateService:
    """Return the ReplicateService bound to the running app."""
    return request.app.state.replicate
