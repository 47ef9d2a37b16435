"""Verify the Semantic Scholar API, optional Redis cache and configured LLM providers."""

from __future__ import annotations

import asyncio
import sys

from scholar_nav.config import get_settings
from scholar_nav.models.orchestrator import InferenceOrchestrator
from scholar_nav.models.schemas import ConversationMessage
from scholar_nav.services.semantic_scholar import SemanticScholarClient
from scholar_nav.utils.exceptions import SearchError


async def check_semantic_scholar() -> bool:
    client = SemanticScholarClient(get_settings())
    try:
        papers = await client.search("attention is all you need")
        print(f"[OK] Semantic Scholar search returned {len(papers)} papers")
        return True
    except SearchError as exc:
        print(f"[FAIL] Semantic Scholar: {exc}")
        return False
    finally:
        await client.close()


async def check_redis() -> bool:
    url = get_settings().REDIS_URL
    if not url:
        print("[SKIP] Redis: REDIS_URL not set (caching disabled)")
        return True
    try:
        from redis.asyncio import from_url

        client = from_url(url)
        pong = await client.ping()
        assert pong is True
        await client.aclose()
        print("[OK] Redis connection successful")
        return True
    except Exception as exc:
        print(f"[FAIL] Redis: {exc}")
        return False


async def check_providers() -> bool:
    providers = get_settings().configured_providers()
    if not providers:
        print("[SKIP] LLM providers: no API keys set (scripted dialogue will be used)")
        return True

    results = await InferenceOrchestrator(providers).call_all(
        [ConversationMessage(role="user", content="Reply with the single word: ready")]
    )
    for result in results:
        status = "OK" if result.success else "FAIL"
        detail = f"{result.latency_ms:.0f} ms" if result.success else result.error
        print(f"  [{status}] {result.provider}: {detail}")
    return any(r.success for r in results)


async def main() -> None:
    print("=" * 50)
    print("Scholar Navigator: Setup Verification")
    print("=" * 50)

    results = await asyncio.gather(
        check_semantic_scholar(),
        check_redis(),
        check_providers(),
    )

    print("=" * 50)
    passed = sum(results)
    total = len(results)
    print(f"Results: {passed}/{total} checks passed")
    if not all(results):
        print("Some checks failed. Review output above.")
        sys.exit(1)
    print("All systems operational.")


if __name__ == "__main__":
    asyncio.run(main())
