"""
Provider registry: turn configured credentials into backend clients.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List, Mapping, Optional

import httpx

from .client import BraveSearchClient, GoogleSearchClient, SearchClient, XaiSearchClient
from .config import (
    BRAVE_API_KEY_ENV,
    GOOGLE_API_KEY_ENV,
    GOOGLE_CX_ENV,
    XAI_API_KEY_ENV,
    WebSearchConfig,
)
from .enums import DEFAULT_PROVIDER_ORDER, ProviderName

logger = logging.getLogger(__name__)

ClientFactory = Callable[[WebSearchConfig], Optional[SearchClient]]


class ProviderRegistry:
    """
    Resolve a provider identity to an instantiated SearchClient.

    A provider with incomplete credentials resolves to None ("not
    configured"); that is a skip, not an error.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._environ = environ
        self._transport = transport
        self._factories: Dict[str, ClientFactory] = {
            ProviderName.GOOGLE.value: self._build_google,
            ProviderName.BRAVE.value: self._build_brave,
            ProviderName.XAI.value: self._build_xai,
        }

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def register(self, name: str, factory: ClientFactory) -> None:
        """Register (or replace) the client factory for ``name``."""
        self._factories[name] = factory

    def resolve(
        self,
        name: str,
        config: Optional[WebSearchConfig] = None,
    ) -> Optional[SearchClient]:
        """
        Build the client for ``name``.

        Returns:
            SearchClient instance or None if unknown / not configured
        """
        factory = self._factories.get(name)
        if factory is None:
            logger.debug("Unknown search provider %r", name)
            return None
        client = factory(config or WebSearchConfig())
        if client is None:
            logger.debug("Search provider %s has incomplete credentials", name)
        return client

    def provider_order(self, config: Optional[WebSearchConfig] = None) -> List[str]:
        """Configured order filtered to known providers, or the default."""
        order = config.provider_order if config else None
        if order:
            known = [name for name in order if name in self._factories]
            if known:
                return known
        return list(DEFAULT_PROVIDER_ORDER)

    # ------------------------------------------------------------------

    def _credential(self, explicit: Optional[str], env_name: str) -> str:
        if explicit:
            return explicit
        return self.environ.get(env_name, "") or ""

    def _build_google(self, config: WebSearchConfig) -> Optional[SearchClient]:
        google = config.providers.google
        api_key = self._credential(google.api_key, GOOGLE_API_KEY_ENV)
        cx = self._credential(google.cx, GOOGLE_CX_ENV)
        if not api_key or not cx:
            return None
        return GoogleSearchClient(api_key=api_key, cx=cx, transport=self._transport)

    def _build_brave(self, config: WebSearchConfig) -> Optional[SearchClient]:
        api_key = self._credential(config.providers.brave.api_key, BRAVE_API_KEY_ENV)
        if not api_key:
            return None
        return BraveSearchClient(api_key=api_key, transport=self._transport)

    def _build_xai(self, config: WebSearchConfig) -> Optional[SearchClient]:
        api_key = self._credential(config.providers.xai.api_key, XAI_API_KEY_ENV)
        if not api_key:
            return None
        return XaiSearchClient(api_key=api_key, transport=self._transport)

