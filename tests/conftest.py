"""
Shared fixtures for the web search tests.
"""

import json
from typing import List

import httpx
import pytest

from websearch.client import SearchClient, SearchProviderError, SearchResult
from websearch.config import (
    BRAVE_API_KEY_ENV,
    GOOGLE_API_KEY_ENV,
    GOOGLE_CX_ENV,
    PROVIDER_ORDER_ENV,
    XAI_API_KEY_ENV,
)


CREDENTIAL_ENV_VARS = [
    GOOGLE_API_KEY_ENV,
    GOOGLE_CX_ENV,
    BRAVE_API_KEY_ENV,
    XAI_API_KEY_ENV,
    PROVIDER_ORDER_ENV,
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test with no provider credentials in the environment."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeClient(SearchClient):
    """In-memory SearchClient that returns canned results or raises."""

    MAX_RESULTS = 20

    def __init__(self, name: str, results: List[SearchResult] = None, error: str = None):
        super().__init__()
        self._name = name
        self._results = results or []
        self._error = error
        self.calls: List[tuple] = []

    @property
    def provider_name(self) -> str:
        return self._name

    def _do_search(self, query: str, count: int) -> List[SearchResult]:
        self.calls.append((query, count))
        if self._error:
            raise SearchProviderError(self._name, self._error)
        return list(self._results)


def json_response(body, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, responses: List):
        self.requests: List[httpx.Request] = []
        self._responses = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if not self._responses:
                raise AssertionError(f"Unexpected request to {request.url}")
            nxt = self._responses.pop(0)
            if callable(nxt):
                return nxt(request)
            return nxt

        super().__init__(handler)

