from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from printapi_client import client as client_module
from printapi_client import Client


def make_response(status_code: int = 200, body: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


@dataclass
class FakeTransport:
    """Stands in for ``requests.post``/``requests.request`` and records calls."""

    responses: list[Any] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)

    def queue(self, status_code: int = 200, body: str = "") -> None:
        self.responses.append(make_response(status_code, body))

    def fail(self, exc: Exception) -> None:
        self.responses.append(exc)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request(method="POST", url=url, **kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def last(self) -> dict[str, Any]:
        return self.calls[-1]


@pytest.fixture
def transport(monkeypatch: pytest.MonkeyPatch) -> FakeTransport:
    fake = FakeTransport()
    monkeypatch.setattr(client_module.requests, "post", fake.post)
    monkeypatch.setattr(client_module.requests, "request", fake.request)
    return fake


@pytest.fixture
def api_client() -> Client:
    return Client("https://test.printapi.nl/v2/", "T")
