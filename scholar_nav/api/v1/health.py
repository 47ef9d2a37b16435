"""Health and readiness endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from scholar_nav.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready() -> dict:
    providers = [p.name for p in get_settings().configured_providers()]
    # No providers is still serviceable: turns fall back to the scripted dialogue.
    return {"status": "ready" if providers else "degraded", "providers": providers}
