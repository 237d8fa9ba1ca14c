from __future__ import annotations

import io
import json
from typing import Any, Callable
from urllib.error import HTTPError

import pytest


class DummyResponse:
    def __init__(self, payload: Any, status: int = 200) -> None:
        self._payload = payload
        self.status = status

    def read(self) -> bytes:
        if isinstance(self._payload, (bytes, str)):
            raw = self._payload
            return raw.encode("utf-8") if isinstance(raw, str) else raw
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self) -> "DummyResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


def http_error(url: str, status: int, body: str) -> HTTPError:
    return HTTPError(url, status, "error", {}, io.BytesIO(body.encode("utf-8")))


class FakeGemini:
    """Scripted stand-in for ``urlopen`` that records every request."""

    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = list(outcomes)
        self.requests: list[Any] = []

    def __call__(self, req, timeout=0):
        self.requests.append(req)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, tuple):
            status, body = outcome
            raise http_error(req.full_url, status, body)
        return DummyResponse(outcome)

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(req.data) for req in self.requests]

    @property
    def urls(self) -> list[str]:
        return [req.full_url for req in self.requests]


def candidate_payload(*parts: dict[str, Any]) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": list(parts)}}]}


@pytest.fixture
def fake_gemini(monkeypatch) -> Callable[..., FakeGemini]:
    def install(*outcomes: Any) -> FakeGemini:
        fake = FakeGemini(list(outcomes))
        monkeypatch.setattr("nano_banana_mcp.gemini.urlopen", fake)
        return fake

    return install
