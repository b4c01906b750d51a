"""
SearchClient ABC and provider implementations.

Supports:
  - Google Custom Search JSON API
  - Brave Search API
  - xAI (Grok) chat completions with live search

Every provider maps its JSON response into the uniform SearchResult shape
and raises SearchProviderError on timeout, transport, status or decode
failures.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Data classes
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SearchResult:
    """Single search hit."""

    title: str
    url: str
    snippet: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class SearchProviderError(RuntimeError):
    """Transport or API failure raised by a backend client."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


# ------------------------------------------------------------------
# Abstract client
# ------------------------------------------------------------------

class SearchClient(ABC):
    """Abstract search interface."""

    # Provider API ceiling for results per request
    MAX_RESULTS: int = 10
    TIMEOUT_SECONDS: float = 15.0
    API_LABEL: str = "Search API"

    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self._transport = transport

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    def _do_search(self, query: str, count: int) -> List[SearchResult]:
        """Provider-specific search implementation."""
        ...

    def search(self, query: str, count: int = 5) -> List[SearchResult]:
        """
        Public search entry point.

        ``count`` is capped to the provider's own ceiling before the
        request is built.
        """
        num = max(1, min(count, self.MAX_RESULTS))
        try:
            return self._do_search(query, num)
        except SearchProviderError:
            raise
        except httpx.TimeoutException as e:
            raise SearchProviderError(
                self.provider_name,
                f"{self.API_LABEL} timed out after {self.TIMEOUT_SECONDS:g}s",
            ) from e
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise SearchProviderError(
                self.provider_name,
                f"{self.API_LABEL} returned {e.response.status_code}: {body}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SearchProviderError(
                self.provider_name,
                f"{self.API_LABEL} request failed: {e}",
            ) from e
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise SearchProviderError(
                self.provider_name,
                f"{self.API_LABEL} returned an invalid response: {e}",
            ) from e

    def _http_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.TIMEOUT_SECONDS, transport=self._transport)


# ------------------------------------------------------------------
# Google Programmable Search Engine (CSE) provider
# ------------------------------------------------------------------

class GoogleSearchClient(SearchClient):
    """Search via Google Custom Search JSON API."""

    API_URL = "https://www.googleapis.com/customsearch/v1"
    API_LABEL = "Google Search API"
    MAX_RESULTS = 10

    def __init__(
        self,
        api_key: str,
        cx: str,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(transport=transport)
        if not cx:
            raise ValueError(
                "Google Search provider requires 'cx' (Custom Search Engine ID)"
            )
        self._api_key = api_key
        self._cx = cx

    @property
    def provider_name(self) -> str:
        return "google"

    def _do_search(self, query: str, count: int) -> List[SearchResult]:
        params: dict = {
            "key": self._api_key,
            "cx": self._cx,
            "q": query,
            "num": count,
        }

        with self._http_client() as client:
            resp = client.get(self.API_URL, params=params)
            resp.raise_for_status()
            data = resp.json()

        results: List[SearchResult] = []
        for item in data.get("items") or []:
            results.append(
                SearchResult(
                    title=item.get("title") or "",
                    url=item.get("link") or "",
                    snippet=item.get("snippet") or "",
                )
            )
        return results


# ------------------------------------------------------------------
# Brave Search API provider
# ------------------------------------------------------------------

class BraveSearchClient(SearchClient):
    """Search via Brave Search (https://api.search.brave.com)."""

    API_URL = "https://api.search.brave.com/res/v1/web/search"
    API_LABEL = "Brave Search API"
    MAX_RESULTS = 20

    def __init__(
        self,
        api_key: str,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(transport=transport)
        self._api_key = api_key

    @property
    def provider_name(self) -> str:
        return "brave"

    def _do_search(self, query: str, count: int) -> List[SearchResult]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "X-Subscription-Token": self._api_key,
        }
        params: dict = {"q": query, "count": count}

        with self._http_client() as client:
            resp = client.get(self.API_URL, params=params, headers=headers)
            resp.raise_for_status()
            data = resp.json()

        results: List[SearchResult] = []
        for item in (data.get("web") or {}).get("results") or []:
            results.append(
                SearchResult(
                    title=item.get("title") or "",
                    url=item.get("url") or "",
                    snippet=item.get("description") or "",
                )
            )
        return results


# ------------------------------------------------------------------
# xAI (Grok) provider
# ------------------------------------------------------------------

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class XaiSearchClient(SearchClient):
    """
    Search via the xAI chat completions API with live search enabled.

    Structured citations are preferred; when the response carries none,
    the model's text answer is parsed for a JSON array of results.
    """

    API_URL = "https://api.x.ai/v1/chat/completions"
    API_LABEL = "xAI API"
    MODEL = "grok-3"
    MAX_RESULTS = 10
    TIMEOUT_SECONDS = 30.0

    def __init__(
        self,
        api_key: str,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(transport=transport)
        self._api_key = api_key

    @property
    def provider_name(self) -> str:
        return "xai"

    def _build_payload(self, query: str, count: int) -> Dict[str, Any]:
        prompt = (
            f"Search the web for: {query}\n\n"
            f"Return ONLY a JSON array of the top {count} results. "
            'Each element must be: {"title":"...","url":"...","snippet":"..."}. '
            "No other text."
        )
        return {
            "model": self.MODEL,
            "messages": [{"role": "user", "content": prompt}],
            "search_parameters": {
                "mode": "auto",
                "max_search_results": count,
                "return_citations": True,
            },
        }

    def _do_search(self, query: str, count: int) -> List[SearchResult]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

        with self._http_client() as client:
            resp = client.post(
                self.API_URL,
                json=self._build_payload(query, count),
                headers=headers,
            )
            resp.raise_for_status()
            data = resp.json()

        citations = data.get("citations") or []
        if citations:
            return [_citation_to_result(c) for c in citations[:count]]

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or "[]"
        return _parse_result_array(content, count)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _citation_to_result(citation: Any) -> SearchResult:
    # Citations arrive either as {"url", "title"} objects or bare URL strings
    if isinstance(citation, dict):
        return SearchResult(
            title=citation.get("title") or "",
            url=citation.get("url") or "",
            snippet="",
        )
    return SearchResult(title="", url=str(citation), snippet="")


def _parse_result_array(content: str, count: int) -> List[SearchResult]:
    """Best-effort extraction of a JSON result array from model text."""
    match = _JSON_ARRAY_RE.search(content)
    if not match:
        return []
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        logger.debug("xAI answer did not contain a parsable JSON array")
        return []
    if not isinstance(parsed, list):
        return []

    results: List[SearchResult] = []
    for item in parsed[:count]:
        if not isinstance(item, dict):
            continue
        results.append(
            SearchResult(
                title=str(item.get("title") or ""),
                url=str(item.get("url") or ""),
                snippet=str(item.get("snippet") or ""),
            )
        )
    return results
