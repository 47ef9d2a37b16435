"""Semantic Scholar Graph API client: paper search plus citation data.

Serves as both the paper-search collaborator used when a conversation
triggers, and the citation-data collaborator used by unfold.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from scholar_nav.models.schemas import Embedding, Paper, SearchParams
from scholar_nav.utils.exceptions import SearchError
from scholar_nav.utils.logging import get_logger
from scholar_nav.utils.rate_limiter import TokenBucketRateLimiter
from scholar_nav.utils.retry import async_retry, retry_after_seconds

if TYPE_CHECKING:
    from scholar_nav.config import Settings
    from scholar_nav.services.cache_service import CacheService

logger = get_logger(__name__)

SEARCH_FIELDS = "paperId,title,year,citationCount,abstract,embedding.specter_v2"
CITATION_FIELDS = "paperId,title,year,citationCount,embedding.specter_v2"
REFERENCE_FIELDS = "paperId,title,year,citationCount"


def parse_paper(raw: dict[str, Any] | None) -> Paper | None:
    """Convert one API record to a Paper; records without a paperId are dropped."""
    if not raw or not raw.get("paperId"):
        return None

    embedding = None
    raw_embedding = raw.get("embedding")
    if isinstance(raw_embedding, dict) and raw_embedding.get("vector"):
        embedding = Embedding(
            model=raw_embedding.get("model") or "specter_v2",
            vector=raw_embedding["vector"],
        )

    return Paper(
        paper_id=raw["paperId"],
        title=raw.get("title") or "",
        year=raw.get("year"),
        citation_count=raw.get("citationCount") or 0,
        abstract=raw.get("abstract"),
        embedding=embedding,
    )


def parse_papers(records: list[dict[str, Any] | None]) -> list[Paper]:
    return [paper for paper in (parse_paper(r) for r in records) if paper is not None]


class SemanticScholarClient:
    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        cache: CacheService | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
    ) -> None:
        self._search_limit = settings.SEARCH_LIMIT
        self._citation_limit = settings.CITATION_LIMIT
        self._cache = cache
        self._limiter = rate_limiter or TokenBucketRateLimiter.for_semantic_scholar(settings)

        self._owns_client = http_client is None
        if http_client is None:
            headers = {}
            if settings.SEMANTIC_SCHOLAR_API_KEY:
                headers["x-api-key"] = settings.SEMANTIC_SCHOLAR_API_KEY
            http_client = httpx.AsyncClient(
                base_url=settings.SEMANTIC_SCHOLAR_BASE_URL,
                headers=headers,
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
        self._http = http_client

    @async_retry(max_attempts=3, base_delay=1.0)
    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        await self._limiter.acquire()
        resp = await self._http.get(path, params=params)
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if resp.status_code == 429:
                wait = retry_after_seconds(exc)
                self._limiter.pause(1.0 if wait is None else wait)
            raise
        return resp.json()

    async def search(
        self,
        query: str,
        year_start: int | None = None,
        year_end: int | None = None,
    ) -> list[Paper]:
        """Search papers by free text, optionally bounded by publication year."""
        params: dict[str, Any] = {
            "query": query,
            "limit": self._search_limit,
            "fields": SEARCH_FIELDS,
        }
        year = SearchParams(query=query, year_start=year_start, year_end=year_end).year_filter()
        if year is not None:
            params["year"] = year

        cache_key = f"search:{query}:{params.get('year', '')}"
        cached = await self._cached(cache_key)
        if cached is not None:
            return cached

        try:
            body = await self._get_json("/paper/search", params)
        except Exception as exc:
            logger.error("paper_search_failed", query=query, error=str(exc))
            raise SearchError(f"Paper search failed for {query!r}: {exc}") from exc

        papers = parse_papers(body.get("data") or [])
        logger.info("paper_search_complete", query=query, results=len(papers))
        await self._store(cache_key, papers)
        return papers

    async def citations_of(self, paper_id: str) -> list[Paper]:
        """Papers citing ``paper_id``. Returns [] on any failure."""
        return await self._fetch_linked(paper_id, "citations", "citingPaper", CITATION_FIELDS)

    async def references_of(self, paper_id: str) -> list[Paper]:
        """Papers cited by ``paper_id``. Returns [] on any failure."""
        return await self._fetch_linked(paper_id, "references", "citedPaper", REFERENCE_FIELDS)

    async def _fetch_linked(self, paper_id: str, kind: str, wrapper: str, fields: str) -> list[Paper]:
        cache_key = f"{kind}:{paper_id}"
        cached = await self._cached(cache_key)
        if cached is not None:
            return cached

        try:
            body = await self._get_json(
                f"/paper/{paper_id}/{kind}",
                {"limit": self._citation_limit, "fields": fields},
            )
            items = body.get("data") or []
            papers = parse_papers([item.get(wrapper) for item in items if isinstance(item, dict)])
        except Exception as exc:
            logger.warning(f"{kind}_fetch_failed", paper_id=paper_id, error=str(exc))
            return []

        await self._store(cache_key, papers)
        return papers

    async def _cached(self, key: str) -> list[Paper] | None:
        if self._cache is None:
            return None
        records = await self._cache.get_papers(key)
        if records is None:
            return None
        logger.debug("s2_cache_hit", key=key)
        return [Paper.model_validate(r) for r in records]

    async def _store(self, key: str, papers: list[Paper]) -> None:
        if self._cache is None:
            return
        await self._cache.set_papers(key, [p.model_dump() for p in papers])

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()
