"""
Tests for configuration loading and the provider registry.
"""

from websearch.client import BraveSearchClient, GoogleSearchClient, XaiSearchClient
from websearch.config import (
    ApiKeyProviderConfig,
    GoogleProviderConfig,
    ProvidersConfig,
    WebSearchConfig,
    load_env_file,
)
from websearch.enums import DEFAULT_PROVIDER_ORDER
from websearch.registry import ProviderRegistry


# ===================================================================
# WebSearchConfig
# ===================================================================


class TestWebSearchConfig:
    """Tests for WebSearchConfig."""

    def test_defaults(self):
        config = WebSearchConfig()
        assert config.provider_order is None
        assert config.providers.google.api_key is None
        assert config.providers.brave.api_key is None

    def test_provider_order_drops_unknown(self):
        config = WebSearchConfig(provider_order=["Brave", "bing", "xai", "duckduckgo"])
        assert config.provider_order == ["brave", "xai"]

    def test_from_dict(self):
        config = WebSearchConfig.model_validate({
            "provider_order": ["xai", "google"],
            "providers": {"google": {"api_key": "k", "cx": "c"}, "xai": {"api_key": "x"}},
        })
        assert config.provider_order == ["xai", "google"]
        assert config.providers.google.cx == "c"
        assert config.providers.xai.api_key == "x"

    def test_from_env(self):
        config = WebSearchConfig.from_env({
            "GOOGLE_SEARCH_API_KEY": "gk",
            "GOOGLE_SEARCH_CX": "gcx",
            "BRAVE_SEARCH_API_KEY": "bk",
            "WEBSEARCH_PROVIDER_ORDER": "brave, google",
        })
        assert config.providers.google.api_key == "gk"
        assert config.providers.google.cx == "gcx"
        assert config.providers.brave.api_key == "bk"
        assert config.providers.xai.api_key is None
        assert config.provider_order == ["brave", "google"]

    def test_from_env_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("XAI_API_KEY", "from-env")
        config = WebSearchConfig.from_env()
        assert config.providers.xai.api_key == "from-env"
        assert config.provider_order is None

    def test_load_env_file(self, tmp_path, monkeypatch):
        # register the variable with monkeypatch so the dotenv write is undone
        monkeypatch.setenv("BRAVE_SEARCH_API_KEY", "placeholder")
        monkeypatch.delenv("BRAVE_SEARCH_API_KEY")
        env_file = tmp_path / ".env"
        env_file.write_text("BRAVE_SEARCH_API_KEY=from-dotenv\n")

        assert load_env_file(str(env_file)) is True

        config = WebSearchConfig.from_env()
        assert config.providers.brave.api_key == "from-dotenv"

    def test_load_env_file_does_not_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BRAVE_SEARCH_API_KEY", "already-set")
        env_file = tmp_path / ".env"
        env_file.write_text("BRAVE_SEARCH_API_KEY=from-dotenv\n")

        load_env_file(str(env_file))

        assert WebSearchConfig.from_env().providers.brave.api_key == "already-set"


# ===================================================================
# ProviderRegistry
# ===================================================================


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_nothing_configured(self):
        registry = ProviderRegistry(environ={})
        for name in DEFAULT_PROVIDER_ORDER:
            assert registry.resolve(name) is None

    def test_unknown_provider(self):
        registry = ProviderRegistry(environ={"BRAVE_SEARCH_API_KEY": "k"})
        assert registry.resolve("bing") is None

    def test_resolve_from_env(self):
        registry = ProviderRegistry(environ={
            "GOOGLE_SEARCH_API_KEY": "gk",
            "GOOGLE_SEARCH_CX": "gcx",
            "BRAVE_SEARCH_API_KEY": "bk",
            "XAI_API_KEY": "xk",
        })
        assert isinstance(registry.resolve("google"), GoogleSearchClient)
        assert isinstance(registry.resolve("brave"), BraveSearchClient)
        assert isinstance(registry.resolve("xai"), XaiSearchClient)

    def test_google_needs_both_credentials(self):
        registry = ProviderRegistry(environ={"GOOGLE_SEARCH_API_KEY": "gk"})
        assert registry.resolve("google") is None

        config = WebSearchConfig(
            providers=ProvidersConfig(google=GoogleProviderConfig(cx="from-config"))
        )
        assert isinstance(registry.resolve("google", config), GoogleSearchClient)

    def test_resolve_from_config(self):
        registry = ProviderRegistry(environ={})
        config = WebSearchConfig(
            providers=ProvidersConfig(brave=ApiKeyProviderConfig(api_key="cfg"))
        )
        client = registry.resolve("brave", config)
        assert isinstance(client, BraveSearchClient)
        assert client._api_key == "cfg"

    def test_config_overrides_env(self):
        registry = ProviderRegistry(environ={"XAI_API_KEY": "env-key"})
        config = WebSearchConfig(
            providers=ProvidersConfig(xai=ApiKeyProviderConfig(api_key="config-key"))
        )
        assert registry.resolve("xai", config)._api_key == "config-key"
        assert registry.resolve("xai")._api_key == "env-key"

    def test_empty_config_value_falls_back_to_env(self):
        registry = ProviderRegistry(environ={"XAI_API_KEY": "env-key"})
        config = WebSearchConfig(providers=ProvidersConfig(xai=ApiKeyProviderConfig(api_key="")))
        assert registry.resolve("xai", config)._api_key == "env-key"

    def test_uses_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("BRAVE_SEARCH_API_KEY", "process-env")
        registry = ProviderRegistry()
        assert isinstance(registry.resolve("brave"), BraveSearchClient)

    def test_default_order(self):
        registry = ProviderRegistry(environ={})
        assert registry.provider_order() == ["google", "brave", "xai"]
        assert registry.provider_order(WebSearchConfig(provider_order=[])) == ["google", "brave", "xai"]

    def test_configured_order(self):
        registry = ProviderRegistry(environ={})
        config = WebSearchConfig(provider_order=["xai", "brave"])
        assert registry.provider_order(config) == ["xai", "brave"]

    def test_all_unknown_order_uses_default(self):
        registry = ProviderRegistry(environ={})
        config = WebSearchConfig(provider_order=["bing"])
        assert registry.provider_order(config) == list(DEFAULT_PROVIDER_ORDER)

    def test_register_custom_factory(self):
        registry = ProviderRegistry(environ={})
        sentinel = object()
        registry.register("brave", lambda config: sentinel)
        assert registry.resolve("brave") is sentinel
