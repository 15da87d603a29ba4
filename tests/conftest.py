"""Shared fixtures: a recording fake of the Taxo API and clients wired to it."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from taxo.client import TaxoMxClient
from tests.fixtures import APP_BASE_URL, DEMO_BASE_URL


class FakeTaxoApi:
    """httpx.MockTransport handler that records every request it receives.

    Replies with ``self.response`` (a callable so each request gets a fresh
    httpx.Response).  Set ``self.error`` to simulate a network failure.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.response: Callable[[], httpx.Response] = lambda: httpx.Response(200, json={"ok": True})
        self.error: Exception | None = None

    def reply(self, status_code: int = 200, json_body: Any = None, text: str | None = None) -> None:
        if text is not None:
            self.response = lambda: httpx.Response(status_code, text=text)
        else:
            self.response = lambda: httpx.Response(status_code, json=json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response()

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request reached the fake Taxo API"
        return self.requests[-1]

    def last_body(self) -> Any:
        content = self.last.content
        return json.loads(content) if content else None


@pytest.fixture
def taxo_api() -> FakeTaxoApi:
    return FakeTaxoApi()


@pytest.fixture
def make_client(taxo_api) -> Callable[..., TaxoMxClient]:
    def factory(token: str = "test-token") -> TaxoMxClient:
        return TaxoMxClient(
            token,
            app_base_url=APP_BASE_URL,
            demo_base_url=DEMO_BASE_URL,
            transport=httpx.MockTransport(taxo_api),
        )

    return factory


@pytest.fixture
def client(make_client) -> TaxoMxClient:
    return make_client()
