"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from scholar_nav.models.schemas import Embedding, Paper, ProviderConfig, ProviderResult

_PROVIDER_ENV = (
    "GROQ_API_KEY",
    "HUGGINGFACE_API_KEY",
    "OPENROUTER_API_KEY",
    "GOOGLE_API_KEY",
    "COHERE_API_KEY",
    "MISTRAL_API_KEY",
)


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Start every test with no provider keys and tracing off."""
    for name in _PROVIDER_ENV:
        monkeypatch.setenv(name, "")
    monkeypatch.setenv("REDIS_URL", "")
    monkeypatch.setenv("SEMANTIC_SCHOLAR_API_KEY", "")
    monkeypatch.setenv("LANGSMITH_API_KEY", "")
    monkeypatch.setenv("LANGCHAIN_TRACING_V2", "false")
    monkeypatch.setenv("LOG_FORMAT", "console")


@pytest.fixture
def settings():
    from scholar_nav.config import Settings

    return Settings(S2_REQUESTS_PER_SECOND=1000.0, S2_PUBLIC_REQUESTS_PER_SECOND=1000.0)


def make_paper(
    paper_id: str,
    citation_count: int = 10,
    year: int | None = 2022,
    vector: list[float] | None = None,
) -> Paper:
    return Paper(
        paper_id=paper_id,
        title=f"Paper {paper_id}",
        year=year,
        citation_count=citation_count,
        abstract=f"Abstract of {paper_id}",
        embedding=Embedding(model="specter_v2", vector=vector) if vector is not None else None,
    )


def make_result(provider: str, content: str = "", success: bool = True) -> ProviderResult:
    return ProviderResult(
        provider=provider,
        content=content,
        latency_ms=1.0,
        success=success,
        error=None if success else "boom",
    )


def make_provider(name: str = "groq") -> ProviderConfig:
    return ProviderConfig(
        name=name,
        endpoint=f"https://{name}.example/v1",
        api_key=f"{name}-key",
        model=f"{name}-model",
        max_tokens=256,
    )


class FakeCitationSource:
    """In-memory citation data with call counting."""

    def __init__(
        self,
        citations: dict[str, list[Paper]] | None = None,
        references: dict[str, list[Paper]] | None = None,
    ) -> None:
        self.citations = citations or {}
        self.references = references or {}
        self.calls: list[tuple[str, str]] = []

    async def citations_of(self, paper_id: str) -> list[Paper]:
        self.calls.append(("citations", paper_id))
        return list(self.citations.get(paper_id, []))

    async def references_of(self, paper_id: str) -> list[Paper]:
        self.calls.append(("references", paper_id))
        return list(self.references.get(paper_id, []))


@pytest.fixture
def sample_papers() -> list[Paper]:
    return [
        make_paper("p1", citation_count=0, vector=[1.0, 0.0]),
        make_paper("p2", citation_count=99, vector=[0.9, 0.1]),
        make_paper("p3", citation_count=5, year=2019),
    ]


@pytest.fixture
def citation_source() -> FakeCitationSource:
    return FakeCitationSource(
        citations={"p1": [make_paper("c1"), make_paper("c2")]},
        references={"p1": [make_paper("r1")]},
    )


@pytest.fixture
def mock_paper_search(sample_papers):
    search = MagicMock()
    search.search = AsyncMock(return_value=sample_papers)
    return search


@pytest.fixture
def mock_orchestrator():
    """Orchestrator with one configured provider and a scriptable call_all."""
    orchestrator = MagicMock()
    orchestrator.providers = [make_provider("groq")]
    orchestrator.call_all = AsyncMock(
        return_value=[make_result("groq", "Which subdomain interests you most?")]
    )
    return orchestrator


@pytest.fixture
def paper_factory():
    return make_paper


@pytest.fixture
def result_factory():
    return make_result


@pytest.fixture
def provider_factory():
    return make_provider


@pytest.fixture
def source_factory():
    return FakeCitationSource
