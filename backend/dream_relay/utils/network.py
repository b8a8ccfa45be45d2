from __future__ import annotations

from typing import Dict, Iterable, Mapping

from starlette.requests import Request

REDACTED_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization"})


def get_client_ip(request: Request | None) -> str:
    """Best-effort client IP extraction for request logs.

    Prefer X-Forwarded-For (left-most) then fall back to the socket peer.
    """
    if request is None:
        return ""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return ""


def redact_headers(headers: Mapping[str, str], redact: Iterable[str] = REDACTED_HEADERS) -> Dict[str, str]:
    """Copy of ``headers`` with credential-bearing values masked."""
    hidden = {h.lower() for h in redact}
    return {k: ("***" if k.lower() in hidden else v) for k, v in headers.items()}
