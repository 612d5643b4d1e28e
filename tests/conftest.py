"""Shared fixtures: an in-process fake hub behind httpx.MockTransport."""

from __future__ import annotations

import json
import threading
from typing import Callable

import httpx
import pytest

from brainclient import BrainClientConfig, HttpTransport, MemoryCacheStore

BASE_URL = "https://brain.example.com"
API_KEY = "brain_test_key"
SERVICE_SECRET = "brn_svc_test_secret"


class FakeHub:
    """Routes requests to handlers by (method, path) and records them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    def on(self, method: str, path: str, status: int = 200, json_body=None, handler=None) -> None:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json_body)

        self.routes[(method.upper(), path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return handler(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content) if request.content else {}


@pytest.fixture
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def transport(hub: FakeHub) -> HttpTransport:
    return HttpTransport(client=httpx.Client(transport=httpx.MockTransport(hub)))


@pytest.fixture
def cache() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def config() -> BrainClientConfig:
    return BrainClientConfig(
        base_url=BASE_URL,
        api_key=API_KEY,
        service_secret=SERVICE_SECRET,
        events={"order.completed": "An order was paid", "user.signup": "A user registered"},
        capabilities={"declared": {"seo_snapshot": "1.0"}},
        heartbeat={"site_name": "Shop", "environment": "testing", "site_url": "https://shop.example.com"},
    )
