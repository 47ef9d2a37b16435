"""Reduce N provider answers to one.

Longest usable answer wins, first one on ties. Callers depend only on the
signature of ``synthesize`` and on the ``UNABLE_TO_CONNECT`` sentinel.
"""

from __future__ import annotations

from collections.abc import Sequence

from scholar_nav.models.schemas import ProviderResult
from scholar_nav.utils.exceptions import TotalSynthesisFailure

UNABLE_TO_CONNECT = (
    "I apologize, but I'm having trouble connecting to the AI models right now. "
    "Please try again."
)


def usable_results(results: Sequence[ProviderResult]) -> list[ProviderResult]:
    return [r for r in results if r.success and r.content.strip()]


def synthesize(results: Sequence[ProviderResult], *, strict: bool = False) -> str:
    """Pick one answer from ``results``.

    Returns ``UNABLE_TO_CONNECT`` when nothing usable came back, or raises
    ``TotalSynthesisFailure`` instead when ``strict`` is set.
    """
    usable = usable_results(results)
    if not usable:
        if strict:
            raise TotalSynthesisFailure(f"No usable answer among {len(results)} provider results")
        return UNABLE_TO_CONNECT
    if len(usable) == 1:
        return usable[0].content
    # max() keeps the first of equal keys, which is the input-order tie-break.
    return max(usable, key=lambda r: len(r.content)).content


def is_total_failure(text: str) -> bool:
    return not text or text == UNABLE_TO_CONNECT
