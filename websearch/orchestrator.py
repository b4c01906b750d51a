"""
Search-Fallback Orchestrator.

Ties together ProviderRegistry, RateLimiter, the backend SearchClients and
the host-safety filter into a single call that:

  1. Clamps the requested result count
  2. Works out which providers to try, in order
  3. Tries each one in turn (registry -> rate limit -> search -> filter)
  4. Returns the first success, or every provider's failure reason

Providers are tried sequentially; a failed provider is skipped, never
retried within the same call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .client import SearchResult
from .config import WebSearchConfig
from .host_safety import filter_results
from .rate_limiter import RateLimiter
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 5
MIN_COUNT = 1
MAX_COUNT = 20
MAX_DIAGNOSTIC_LENGTH = 300


@dataclass
class SearchSuccess:
    """A provider answered; results are already filtered."""

    provider: str
    query: str
    results: List[SearchResult] = field(default_factory=list)

    ok = True

    @property
    def result_count(self) -> int:
        return len(self.results)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "query": self.query,
            "resultCount": self.result_count,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class SearchFailure:
    """Every candidate provider was skipped or failed."""

    diagnostics: List[str] = field(default_factory=list)

    ok = False


SearchOutcome = Union[SearchSuccess, SearchFailure]


def clamp_count(count: Optional[Any]) -> int:
    """Clamp a caller-supplied result count into [1, 20] (default 5)."""
    if count is None:
        return DEFAULT_COUNT
    try:
        value = int(count)
    except OverflowError:
        # +/- infinity
        return MAX_COUNT if count > 0 else MIN_COUNT
    except (TypeError, ValueError):
        return DEFAULT_COUNT
    return max(MIN_COUNT, min(value, MAX_COUNT))


class SearchFallback:
    """
    Main orchestrator for multi-provider search.

    Usage:
        fb = SearchFallback(
            config=WebSearchConfig.from_env(),
            rate_limiter=RateLimiter(),
        )
        outcome = fb.search("python packaging", count=5)
    """

    def __init__(
        self,
        config: Optional[WebSearchConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        registry: Optional[ProviderRegistry] = None,
    ):
        self._config = config or WebSearchConfig()
        self._limiter = rate_limiter or RateLimiter()
        self._registry = registry or ProviderRegistry()

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._limiter

    def candidate_order(self, provider: Optional[str] = None) -> List[str]:
        """
        Providers to try, in order.

        A forced provider opts out of the fallback chain entirely; a blank
        one is ignored.
        """
        forced = (provider or "").strip().lower()
        if forced:
            return [forced]
        return self._registry.provider_order(self._config)

    def search(
        self,
        query: str,
        count: Optional[float] = None,
        provider: Optional[str] = None,
    ) -> SearchOutcome:
        """
        Run one search through the fallback chain.
        """
        num = clamp_count(count)
        order = self.candidate_order(provider)
        logger.debug("Searching %r (count=%d) with providers %s", query, num, order)

        diagnostics: List[str] = []

        for name in order:
            client = self._registry.resolve(name, self._config)
            if client is None:
                diagnostics.append(f"{name}: not configured")
                continue

            if not self._limiter.try_consume(name):
                diagnostics.append(f"{name}: rate limited")
                continue

            try:
                raw = client.search(query, num)
            except Exception as e:
                msg = _truncate(str(e) or e.__class__.__name__)
                logger.warning("Search provider %s failed: %s", name, msg)
                diagnostics.append(f"{name}: {msg}")
                continue

            results = filter_results(raw)
            logger.info(
                "Search provider %s answered with %d result(s) (%d kept)",
                name,
                len(raw),
                len(results),
            )
            return SearchSuccess(provider=name, query=query, results=results)

        return SearchFailure(diagnostics=diagnostics)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _truncate(text: str, limit: int = MAX_DIAGNOSTIC_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
