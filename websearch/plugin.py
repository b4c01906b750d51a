"""
Plugin entry point for hosts that load tool servers.

The host passes a context object; when it offers
``register_tool_server`` the web search tool server is registered there.
Credentials are read from the environment at search time.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import WebSearchConfig
from .rate_limiter import RateLimiter
from .tool import ToolServerConfig, build_web_search_tools

logger = logging.getLogger(__name__)


class WebSearchPlugin:
    """Web search via Google, Brave and xAI with fallback chain and SSRF protection."""

    name = "websearch"
    version = "1.0.0"
    description = "Web search via Brave, Google, and xAI with fallback chain and SSRF protection"

    def __init__(self, config: Optional[WebSearchConfig] = None):
        self._config = config or WebSearchConfig()
        self._rate_limiter = RateLimiter()
        self.server: Optional[ToolServerConfig] = None

    def init(self, ctx: Any) -> None:
        """Register the tool server with the host, if it supports that."""
        self.server = build_web_search_tools(self._config, rate_limiter=self._rate_limiter)

        register = getattr(ctx, "register_tool_server", None)
        if callable(register):
            register(self.server)

        log = getattr(ctx, "log", None) or logger
        log.info("Web search plugin initialized")

    def shutdown(self) -> None:
        # Nothing to release: buckets are plain accounting
        self.server = None


plugin = WebSearchPlugin()
