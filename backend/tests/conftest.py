from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from dream_relay.config import Settings
from dream_relay.main import create_app
from dream_relay.services.replicate import ReplicateService

API_KEY = "r8_test_key"


class Upstream:
    """Fake Replicate: records requests and answers through ``handler``."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], Any] = lambda request: httpx.Response(200, json={"id": "p1"})

    def reply(self, status_code: int = 200, body: Any = None, **kwargs: Any) -> None:
        if body is None:
            self.handler = lambda request: httpx.Response(status_code, **kwargs)
        else:
            self.handler = lambda request: httpx.Response(status_code, json=body)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    def sent_json(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("REPLICATE_API_KEY", API_KEY)
    monkeypatch.setenv("REPLICATE_API_BASE", "https://replicate.test/v1")
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.delenv("UPSTREAM_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("STUCK_AFTER_SECONDS", raising=False)
    monkeypatch.delenv("DEFAULT_NUM_FRAMES", raising=False)
    monkeypatch.delenv("DEFAULT_FPS", raising=False)
    return Settings()


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def service(settings: Settings, upstream: Upstream) -> ReplicateService:
    return ReplicateService(settings, transport=upstream.transport)


@pytest.fixture
def client(settings: Settings, upstream: Upstream) -> TestClient:
    app = create_app(settings, transport=upstream.transport)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
