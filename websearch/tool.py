"""
The ``web_search`` tool exposed to agents.

Wraps SearchFallback in a tool spec (name, description, JSON input schema,
handler) and formats the outcome as tool content: a JSON payload on
success, or an error listing every provider's failure plus setup hints.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .config import (
    BRAVE_API_KEY_ENV,
    GOOGLE_API_KEY_ENV,
    GOOGLE_CX_ENV,
    XAI_API_KEY_ENV,
    WebSearchConfig,
)
from .orchestrator import MAX_COUNT, SearchFallback, SearchOutcome
from .rate_limiter import RateLimiter
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "web-search"
SERVER_VERSION = "1.0.0"
TOOL_NAME = "web_search"

TOOL_DESCRIPTION = (
    "Search the web using configured providers (Google, Brave, xAI/Grok). "
    "Returns structured results with title, URL, and snippet. Providers are "
    "tried in order with automatic fallback."
)

INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Search query string"},
        "count": {
            "type": "number",
            "description": f"Number of results to return (default: 5, max: {MAX_COUNT})",
        },
        "provider": {
            "type": "string",
            "description": "Force a specific provider: google, brave, xai. Omit for auto fallback chain.",
        },
    },
    "required": ["query"],
}

SETUP_HINTS = (
    "Configure at least one provider via environment variables or config:\n"
    f"  {GOOGLE_API_KEY_ENV} + {GOOGLE_CX_ENV}\n"
    f"  {BRAVE_API_KEY_ENV}\n"
    f"  {XAI_API_KEY_ENV}"
)


# ------------------------------------------------------------------
# Data classes
# ------------------------------------------------------------------

@dataclass
class ToolResult:
    """Standardised return type for tools."""

    content: List[Dict[str, str]] = field(default_factory=list)
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n".join(c.get("text", "") for c in self.content)


@dataclass
class ToolSpec:
    """Specification and callable for a tool."""

    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable[[Dict[str, Any]], ToolResult]


@dataclass
class ToolServerConfig:
    """A named, versioned group of tools handed to the host."""

    name: str
    version: str
    tools: List[ToolSpec] = field(default_factory=list)


class WebSearchInput(BaseModel):
    """Validated ``web_search`` arguments."""
    query: str = Field(..., description="Search query string")
    count: Optional[float] = Field(None, description="Number of results to return")
    provider: Optional[str] = Field(None, description="Force a specific provider")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be empty")
        return v


# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------

def format_outcome(outcome: SearchOutcome) -> ToolResult:
    """Render a search outcome as tool content."""
    if not outcome.ok:
        lines = "\n".join(f"  - {d}" for d in outcome.diagnostics)
        text = f"All search providers failed:\n{lines}\n\n{SETUP_HINTS}"
        return ToolResult(content=[{"type": "text", "text": text}], is_error=True)

    text = json.dumps(outcome.to_payload(), indent=2)
    return ToolResult(content=[{"type": "text", "text": text}])


def _invalid_input(message: str) -> ToolResult:
    return ToolResult(
        content=[{"type": "text", "text": f"Invalid web_search arguments: {message}"}],
        is_error=True,
    )


# ------------------------------------------------------------------
# Builder
# ------------------------------------------------------------------

def build_web_search_tools(
    config: Optional[WebSearchConfig] = None,
    rate_limiter: Optional[RateLimiter] = None,
    registry: Optional[ProviderRegistry] = None,
) -> ToolServerConfig:
    """
    Build the tool server config holding the ``web_search`` tool.

    The rate limiter is created here once and shared by every call the
    returned handler serves.
    """
    fallback = SearchFallback(
        config=config,
        rate_limiter=rate_limiter or RateLimiter(),
        registry=registry,
    )

    def handler(args: Dict[str, Any]) -> ToolResult:
        try:
            params = WebSearchInput.model_validate(args or {})
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning("Rejected web_search call: %s", errors)
            return _invalid_input(errors)

        outcome = fallback.search(
            params.query,
            count=params.count,
            provider=params.provider,
        )
        return format_outcome(outcome)

    return ToolServerConfig(
        name=SERVER_NAME,
        version=SERVER_VERSION,
        tools=[
            ToolSpec(
                name=TOOL_NAME,
                description=TOOL_DESCRIPTION,
                input_schema=INPUT_SCHEMA,
                handler=handler,
            )
        ],
    )
