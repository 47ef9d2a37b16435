"""Shared FastAPI dependency injection."""

from __future__ import annotations

from scholar_nav.services.session_service import SessionService

_sessions: SessionService | None = None


def set_session_service(service: SessionService | None) -> None:
    global _sessions
    _sessions = service


def get_session_service() -> SessionService:
    if _sessions is None:
        raise RuntimeError("Session service not initialized")
    return _sessions
