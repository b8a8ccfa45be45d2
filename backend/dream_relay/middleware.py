"""Request/response logging middleware."""
from __future__ import annotations

import json
import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .utils.network import get_client_ip, redact_headers

# Liveness probes are polled constantly; keep them out of the completion log
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request line, POST headers and bodies, and the outcome.

    The logger is injectable so tests (or a deployment) can route the
    records elsewhere.
    """

    def __init__(self, app: ASGIApp, logger: Optional[logging.Logger] = None, log_bodies: bool = True) -> None:
        super().__init__(app)
        self.logger = logger or logging.getLogger(__name__)
        self.log_bodies = log_bodies

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        self.logger.info("%s %s", request.method, path)

        if request.method == "POST":
            self.logger.info("Request headers: %s", redact_headers(request.headers))
            if self.log_bodies:
                self.logger.info("Request body: %s", await self._render_body(request))

        response = await call_next(request)

        if request.url.path not in QUIET_PATHS:
            self.logger.info(
                "%s %s -> %s in %dms (client=%s)",
                request.method,
                path,
                response.status_code,
                int((time.perf_counter() - start) * 1000),
                get_client_ip(request) or "unknown",
            )
        return response

    @staticmethod
    async def _render_body(request: Request) -> str:
        raw = await request.body()
        if not raw:
            return "<empty>"
        try:
            return json.dumps(json.loads(raw), indent=2)
        except ValueError:
            return raw[:500].decode("utf-8", errors="replace")
