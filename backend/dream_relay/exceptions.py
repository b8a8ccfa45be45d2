"""Relay error taxonomy.

Every error carries the HTTP status it maps to, a diagnostic ``error`` string
(safe to log, may echo provider detail) and a ``user_message`` that is always
safe to display. Routers catch these and translate them to JSON responses.
"""
from __future__ import annotations

from typing import Dict

INVALID_API_KEY_MESSAGE = "Invalid API key. Please check your Replicate API key configuration."


class RelayError(Exception):
    """Base class for failures that end up in an error envelope."""

    status_code: int = 500

    def __init__(self, error: str, user_message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.user_message = user_message or error
        if status_code is not None:
            self.status_code = status_code

    def to_envelope(self) -> Dict[str, str]:
        return {"error": self.error, "userMessage": self.user_message}


class PayloadValidationError(RelayError):
    """Request body is missing required fields (maps to HTTP 400). Never forwarded upstream."""

    status_code = 400


class MissingPredictionIdError(RelayError):
    """Status lookup without a prediction id (maps to HTTP 500)."""


class UpstreamError(RelayError):
    """Provider answered non-2xx; its status code is passed through."""


class UpstreamTimeoutError(RelayError):
    """Provider call exceeded the hard deadline and was cancelled."""


class UpstreamProtocolError(RelayError):
    """Provider answered 2xx but the body lacks fields the relay depends on."""


class StalePredictionError(RelayError):
    """Prediction still ``starting`` long after its creation timestamp."""
