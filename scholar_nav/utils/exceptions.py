"""Custom exception hierarchy for the research navigator.

None of these are fatal: each is recovered at the boundary of the component
that raises it and turned into a degraded result or a plain user message.
"""

from __future__ import annotations


class ScholarNavError(Exception):
    """Base exception for all research navigator errors."""


class ProviderError(ScholarNavError):
    """Transport or HTTP failure from one LLM backend."""

    def __init__(self, provider: str, reason: str, status_code: int | None = None) -> None:
        self.provider = provider
        self.reason = reason
        self.status_code = status_code
        if status_code is not None:
            message = f"{provider} API error: {status_code}"
        else:
            message = f"{provider} transport error: {reason}"
        super().__init__(message)


class UnsupportedProvider(ScholarNavError):
    """No client variant is registered for the configured provider name."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unknown provider: {provider}")


class TotalSynthesisFailure(ScholarNavError):
    """Zero usable provider results were available to synthesize."""


class FetchDegradation(ScholarNavError):
    """A citation or reference sub-fetch failed while unfolding a node."""


class UnexpectedControllerError(ScholarNavError):
    """Any other failure while producing a conversation turn."""


class SearchError(ScholarNavError):
    """Semantic Scholar paper search failure."""


class NodeNotFoundError(ScholarNavError):
    """The requested graph node does not exist."""


class ConversationNotFoundError(ScholarNavError):
    """No conversation is registered under the requested id."""


class GraphNotReadyError(ScholarNavError):
    """A graph operation was requested before the search produced a graph."""
