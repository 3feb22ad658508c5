"""Shared fixtures: a fake Orka API served through httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from orkabuild.client import OrkaClient
from orkabuild.config import RunConfig
from orkabuild.reporting import RecordingReporter
from orkabuild.store import InMemoryStore

ENDPOINT = "http://orka.test"

Route = Tuple[str, str]


class FakeOrka:
    """Record requests and answer them from a per-route table.

    Routes default to the success status of each endpoint. Override one with
    ``fake.respond("POST", "/resources/image/copy", 500)`` or make it raise a
    transport error with ``fake.fail_transport(...)``.
    """

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.routes: Dict[Route, Callable[[httpx.Request], httpx.Response]] = {}
        self.respond("POST", "/token", 200, {"token": "tok-123"})
        self.respond("POST", "/resources/image/copy", 200, {"message": "copied"})
        self.respond("POST", "/resources/vm/create", 201, {"message": "created"})
        self.respond(
            "POST",
            "/resources/vm/deploy",
            200,
            {"vmId": "vm-1", "ip": "10.0.0.5", "sshPort": "2222"},
        )
        self.respond("POST", "/resources/image/commit", 200, {"message": "committed"})
        self.respond("POST", "/resources/image/save", 200, {"message": "saved"})
        self.respond("DELETE", "/resources/image/delete", 200, {"message": "deleted"})
        self.respond("DELETE", "/resources/vm/purge", 200, {"message": "purged"})

    def respond(self, method: str, path: str, status: int, body: Any = None) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)

        self.routes[(method, path)] = handler

    def fail_transport(self, method: str, path: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content.decode()) if request.content else None
        self.calls.append(
            {
                "method": request.method,
                "path": request.url.path,
                "json": body,
                "headers": dict(request.headers),
            }
        )
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    def paths(self) -> List[str]:
        return [call["path"] for call in self.calls]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    def call(self, path: str) -> Dict[str, Any]:
        return next(call for call in self.calls if call["path"] == path)


@pytest.fixture
def fake_orka() -> FakeOrka:
    return FakeOrka()


@pytest.fixture
def client(fake_orka):
    http = httpx.Client(transport=httpx.MockTransport(fake_orka))
    orka = OrkaClient(ENDPOINT, http_client=http)
    yield orka
    http.close()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def make_config():
    def _make(**overrides) -> RunConfig:
        values = dict(
            endpoint=ENDPOINT,
            user="ci@example.com",
            password="secret",
            source_image="base.img",
            image_name="dest.img",
            vm_builder_name="builder-1",
        )
        values.update(overrides)
        return RunConfig(**values)

    return _make
