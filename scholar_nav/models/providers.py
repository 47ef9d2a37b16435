"""Provider clients: one adapter per LLM backend behind a common ``send``.

OpenAI-compatible backends (Groq, OpenRouter, Mistral) go through
``ChatOpenAI`` with the whole transcript. Hugging Face, Google and Cohere
expose single-prompt endpoints and are called with httpx using only the
latest message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from scholar_nav.models.schemas import ConversationMessage, ProviderConfig
from scholar_nav.utils.exceptions import ProviderError, UnsupportedProvider
from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7


@dataclass(frozen=True)
class ProviderDefaults:
    endpoint: str
    model: str


# Order here is the order providers are fanned out to.
PROVIDER_DEFAULTS: dict[str, ProviderDefaults] = {
    "groq": ProviderDefaults(
        endpoint="https://api.groq.com/openai/v1",
        model="llama3-70b-8192",
    ),
    "huggingface": ProviderDefaults(
        endpoint="https://api-inference.huggingface.co/models",
        model="meta-llama/Meta-Llama-3-70B-Instruct",
    ),
    "openrouter": ProviderDefaults(
        endpoint="https://openrouter.ai/api/v1",
        model="meta-llama/llama-3-70b-instruct",
    ),
    "google": ProviderDefaults(
        endpoint="https://generativelanguage.googleapis.com/v1beta/models",
        model="gemma-2-9b-it",
    ),
    "cohere": ProviderDefaults(
        endpoint="https://api.cohere.ai/v1/chat",
        model="command-r",
    ),
    "mistral": ProviderDefaults(
        endpoint="https://api.mistral.ai/v1",
        model="mistral-small-latest",
    ),
}


def _dig(data: Any, *path: str | int) -> Any:
    """Walk nested JSON, returning None at the first missing step."""
    current = data
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            return None
    return current


class ProviderClient(ABC):
    """Adapts one backend's request/response shape to ``send(messages) -> str``."""

    def __init__(
        self,
        config: ProviderConfig,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.config = config
        self._http = http_client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.config.name

    @abstractmethod
    async def send(self, messages: list[ConversationMessage]) -> str:
        """Return the backend's reply as plain text or raise ProviderError."""

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        try:
            if self._http is not None:
                resp = await self._http.post(
                    url, json=payload, headers=headers, params=params, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, reason=str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            raise ProviderError(self.name, reason=resp.reason_phrase, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(self.name, reason="response body is not JSON") from exc

    def _bearer(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    @staticmethod
    def _last_content(messages: list[ConversationMessage]) -> str:
        return messages[-1].content if messages else ""


class OpenAICompatibleClient(ProviderClient):
    """Chat-completions backends; sends the full transcript."""

    temperature: ClassVar[float | None] = DEFAULT_TEMPERATURE
    extra_headers: ClassVar[dict[str, str]] = {}

    def __init__(
        self,
        config: ProviderConfig,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        super().__init__(config, http_client, timeout)
        kwargs: dict[str, Any] = {
            "model": config.model,
            "openai_api_key": config.api_key,
            "openai_api_base": config.endpoint,
            "max_tokens": config.max_tokens,
            # The orchestrator never retries; neither does the SDK underneath it.
            "max_retries": 0,
            "timeout": timeout,
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.extra_headers:
            kwargs["default_headers"] = dict(self.extra_headers)
        self._model = ChatOpenAI(**kwargs)

    @staticmethod
    def to_langchain(messages: list[ConversationMessage]) -> list[BaseMessage]:
        converted: list[BaseMessage] = []
        for message in messages:
            if message.role == "system":
                converted.append(SystemMessage(content=message.content))
            elif message.role == "user":
                converted.append(HumanMessage(content=message.content))
            else:
                converted.append(AIMessage(content=message.content))
        return converted

    async def send(self, messages: list[ConversationMessage]) -> str:
        try:
            result = await self._model.ainvoke(self.to_langchain(messages))
        except Exception as exc:
            raise ProviderError(
                self.name,
                reason=str(exc) or type(exc).__name__,
                status_code=getattr(exc, "status_code", None),
            ) from exc
        content = getattr(result, "content", "")
        return content if isinstance(content, str) else ""


class GroqClient(OpenAICompatibleClient):
    pass


class OpenRouterClient(OpenAICompatibleClient):
    temperature = None
    extra_headers = {
        "HTTP-Referer": "https://scholar-navigator.local",
        "X-Title": "Scholar Navigator",
    }


class MistralClient(OpenAICompatibleClient):
    pass


class HuggingFaceClient(ProviderClient):
    async def send(self, messages: list[ConversationMessage]) -> str:
        data = await self._post_json(
            f"{self.config.endpoint}/{self.config.model}",
            {
                "inputs": self._last_content(messages),
                "parameters": {
                    "max_new_tokens": self.config.max_tokens,
                    "temperature": DEFAULT_TEMPERATURE,
                    "return_full_text": False,
                },
            },
            headers=self._bearer(),
        )
        return _dig(data, 0, "generated_text") or ""


class GoogleClient(ProviderClient):
    async def send(self, messages: list[ConversationMessage]) -> str:
        data = await self._post_json(
            f"{self.config.endpoint}/{self.config.model}:generateContent",
            {"contents": [{"parts": [{"text": self._last_content(messages)}]}]},
            params={"key": self.config.api_key},
        )
        return _dig(data, "candidates", 0, "content", "parts", 0, "text") or ""


class CohereClient(ProviderClient):
    async def send(self, messages: list[ConversationMessage]) -> str:
        data = await self._post_json(
            self.config.endpoint,
            {
                "model": self.config.model,
                "message": self._last_content(messages),
                "temperature": DEFAULT_TEMPERATURE,
            },
            headers=self._bearer(),
        )
        return _dig(data, "text") or ""


PROVIDER_CLIENTS: dict[str, type[ProviderClient]] = {
    "groq": GroqClient,
    "huggingface": HuggingFaceClient,
    "openrouter": OpenRouterClient,
    "google": GoogleClient,
    "cohere": CohereClient,
    "mistral": MistralClient,
}


def create_client(
    config: ProviderConfig,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 60.0,
) -> ProviderClient:
    """Select the client variant for ``config.name``."""
    client_cls = PROVIDER_CLIENTS.get(config.name)
    if client_cls is None:
        raise UnsupportedProvider(config.name)
    return client_cls(config, http_client=http_client, timeout=timeout)
