"""
Pydantic configuration models for the web search plugin.

Credentials may come from explicit config or from the environment
(optionally seeded from a ``.env`` file). Explicit, non-empty config
values win over the environment.
"""

from __future__ import annotations

import logging
import os
from typing import List, Mapping, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from .enums import KNOWN_PROVIDERS

logger = logging.getLogger(__name__)

# Environment variable names
GOOGLE_API_KEY_ENV = "GOOGLE_SEARCH_API_KEY"
GOOGLE_CX_ENV = "GOOGLE_SEARCH_CX"
BRAVE_API_KEY_ENV = "BRAVE_SEARCH_API_KEY"
XAI_API_KEY_ENV = "XAI_API_KEY"
PROVIDER_ORDER_ENV = "WEBSEARCH_PROVIDER_ORDER"


class GoogleProviderConfig(BaseModel):
    """Google Custom Search credentials (both required)."""
    api_key: Optional[str] = Field(None, description="Google API key with Custom Search enabled")
    cx: Optional[str] = Field(None, description="Custom Search Engine ID")


class ApiKeyProviderConfig(BaseModel):
    """Credentials for providers that only need an API key."""
    api_key: Optional[str] = Field(None, description="Provider API key")


class ProvidersConfig(BaseModel):
    """Per-provider credential blocks."""
    google: GoogleProviderConfig = Field(default_factory=GoogleProviderConfig)
    brave: ApiKeyProviderConfig = Field(default_factory=ApiKeyProviderConfig)
    xai: ApiKeyProviderConfig = Field(default_factory=ApiKeyProviderConfig)


class WebSearchConfig(BaseModel):
    """Top-level plugin configuration."""
    provider_order: Optional[List[str]] = Field(
        None,
        description="Providers to try, in order. Unknown names are dropped.",
    )
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)

    @field_validator("provider_order")
    @classmethod
    def validate_provider_order(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Normalise names and drop anything that is not a known provider."""
        if v is None:
            return None
        order: List[str] = []
        for raw in v:
            name = str(raw).strip().lower()
            if name not in KNOWN_PROVIDERS:
                logger.warning("Ignoring unknown search provider %r in provider order", raw)
                continue
            order.append(name)
        return order

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> WebSearchConfig:
        """Build a config from environment variables."""
        env = os.environ if environ is None else environ
        raw_order = env.get(PROVIDER_ORDER_ENV, "")
        order = [p for p in raw_order.split(",") if p.strip()] or None
        return cls(
            provider_order=order,
            providers=ProvidersConfig(
                google=GoogleProviderConfig(
                    api_key=env.get(GOOGLE_API_KEY_ENV) or None,
                    cx=env.get(GOOGLE_CX_ENV) or None,
                ),
                brave=ApiKeyProviderConfig(api_key=env.get(BRAVE_API_KEY_ENV) or None),
                xai=ApiKeyProviderConfig(api_key=env.get(XAI_API_KEY_ENV) or None),
            ),
        )


def load_env_file(path: Optional[str] = None) -> bool:
    """
    Load a ``.env`` file without overriding variables already set.

    With no path, the nearest ``.env`` at or above the working directory is used.
    """
    loaded = load_dotenv(dotenv_path=path or find_dotenv(usecwd=True), override=False)
    if loaded:
        logger.debug("Loaded environment from %s", path or ".env")
    return loaded
