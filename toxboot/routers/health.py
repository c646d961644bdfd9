"""Health endpoint.

- GET /health — service status, active registry layout, in-flight probes
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from toxboot.models.responses import ApiResponse


def create_health_router(
    *,
    scheduler: Any = None,
    layout_name: str | None = None,
    registry_url: str | None = None,
) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health check with probe statistics."""
        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "registry_layout": layout_name,
                "registry_url": registry_url,
                "inflight_probes": scheduler.inflight if scheduler else 0,
            },
        ).model_dump()

    return health_router
