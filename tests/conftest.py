"""Shared fixtures: a fake requests session recording every call."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from fbmessenger.outbound.graph import GraphApiClient
from fbmessenger.outbound.settings import GraphApiSettings


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)

    def json(self) -> Any:
        return json.loads(self.text)


@dataclass
class FakeSession:
    responses: list = field(default_factory=list)
    calls: list = field(default_factory=list)
    error: Exception | None = None

    def queue(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.responses.append(FakeResponse(status_code, body, text))

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        files = kwargs.get("files") or {}
        # Snapshot upload state while the exchange is in flight
        kwargs["files_open"] = {name: not part[1].closed for name, part in files.items()}
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return FakeResponse(200, {"recipient_id": "1", "message_id": "mid.1"})


@pytest.fixture
def settings() -> GraphApiSettings:
    return GraphApiSettings(access_token="PAGE_TOKEN", api_version="v2.11")


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(settings: GraphApiSettings, session: FakeSession) -> GraphApiClient:
    return GraphApiClient(settings=settings, session=session)


@pytest.fixture
def batch_client(settings: GraphApiSettings, session: FakeSession) -> GraphApiClient:
    return GraphApiClient(settings=settings, session=session, batch=True)
