from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scholar_nav.models.schemas import ProviderConfig

# Keys shipped in example .env files; treated the same as an empty key.
_PLACEHOLDER_KEYS = frozenset({
    "gsk_YOUR_KEY_HERE",
    "hf_YOUR_TOKEN_HERE",
    "sk-or_YOUR_KEY_HERE",
    "AIza_YOUR_KEY_HERE",
    "YOUR_KEY_HERE",
})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM providers (an empty key leaves the provider out)
    GROQ_API_KEY: str = ""
    HUGGINGFACE_API_KEY: str = ""
    OPENROUTER_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""
    COHERE_API_KEY: str = ""
    MISTRAL_API_KEY: str = ""
    PROVIDER_MAX_TOKENS: int = 1024

    # Semantic Scholar
    SEMANTIC_SCHOLAR_BASE_URL: str = "https://api.semanticscholar.org/graph/v1"
    SEMANTIC_SCHOLAR_API_KEY: str = ""
    SEARCH_LIMIT: int = 15
    CITATION_LIMIT: int = 10
    # Per-key rate; without a key requests share the slower public pool.
    S2_REQUESTS_PER_SECOND: float = 1.0
    S2_PUBLIC_REQUESTS_PER_SECOND: float = 0.3
    S2_BURST_CAPACITY: int = 5

    # HTTP transport
    HTTP_TIMEOUT_SECONDS: float = 60.0

    # Redis (empty disables response caching)
    REDIS_URL: str = ""
    CACHE_TTL_SECONDS: int = 3600

    # LangSmith
    LANGSMITH_API_KEY: str = ""
    LANGSMITH_PROJECT: str = "scholar-navigator"
    LANGCHAIN_TRACING_V2: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")

    def provider_keys(self) -> dict[str, str]:
        return {
            "groq": self.GROQ_API_KEY,
            "huggingface": self.HUGGINGFACE_API_KEY,
            "openrouter": self.OPENROUTER_API_KEY,
            "google": self.GOOGLE_API_KEY,
            "cohere": self.COHERE_API_KEY,
            "mistral": self.MISTRAL_API_KEY,
        }

    def configured_providers(self, overrides: dict[str, str] | None = None) -> list[ProviderConfig]:
        """Build one ProviderConfig per provider that has a usable key.

        ``overrides`` are per-user keys that take precedence over the
        environment. Providers without a key are omitted, not reported.
        """
        from scholar_nav.models.providers import PROVIDER_DEFAULTS

        keys = self.provider_keys()
        for name, key in (overrides or {}).items():
            if key:
                keys[name] = key

        providers: list[ProviderConfig] = []
        for name, defaults in PROVIDER_DEFAULTS.items():
            key = keys.get(name, "")
            if not key or key in _PLACEHOLDER_KEYS:
                continue
            providers.append(
                ProviderConfig(
                    name=name,
                    endpoint=defaults.endpoint,
                    api_key=key,
                    model=defaults.model,
                    max_tokens=self.PROVIDER_MAX_TOKENS,
                )
            )
        return providers


def get_settings() -> Settings:
    return Settings()
