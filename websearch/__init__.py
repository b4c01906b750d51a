"""
Web search with a provider fallback chain, per-provider rate limiting and
SSRF-safe result filtering.
"""

from .client import (
    BraveSearchClient,
    GoogleSearchClient,
    SearchClient,
    SearchProviderError,
    SearchResult,
    XaiSearchClient,
)
from .config import WebSearchConfig
from .enums import DEFAULT_PROVIDER_ORDER, KNOWN_PROVIDERS, ProviderName
from .host_safety import filter_results, is_private_url
from .orchestrator import SearchFailure, SearchFallback, SearchOutcome, SearchSuccess
from .plugin import WebSearchPlugin
from .rate_limiter import RateLimiter, TokenBucket
from .registry import ProviderRegistry
from .tool import ToolResult, ToolServerConfig, ToolSpec, build_web_search_tools

__all__ = [
    "SearchClient",
    "SearchResult",
    "SearchProviderError",
    "GoogleSearchClient",
    "BraveSearchClient",
    "XaiSearchClient",
    "WebSearchConfig",
    "ProviderName",
    "KNOWN_PROVIDERS",
    "DEFAULT_PROVIDER_ORDER",
    "is_private_url",
    "filter_results",
    "SearchFallback",
    "SearchOutcome",
    "SearchSuccess",
    "SearchFailure",
    "RateLimiter",
    "TokenBucket",
    "ProviderRegistry",
    "ToolResult",
    "ToolSpec",
    "ToolServerConfig",
    "build_web_search_tools",
    "WebSearchPlugin",
]
