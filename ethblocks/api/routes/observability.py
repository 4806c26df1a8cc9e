"""Observability API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...errors import UnknownEventType


class QueueStatsResponse(BaseModel):
    """Response model for one event queue."""

    event_type: str
    depth: int
    announced: bool
    dropped: int


class HealthResponse(BaseModel):
    """Response model for health."""

    status: str
    contract_address: str | None
    network_id: int


def create_observability_router(app: Application) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> dict:
        """Liveness plus the active contract."""
        return {
            "status": "ok",
            "contract_address": app.gateway.contract_address,
            "network_id": app.gateway.network_id,
        }

    @router.get("/events", response_model=list[QueueStatsResponse])
    async def get_event_queues() -> list[dict]:
        """Depth and announced state of every event queue."""
        return [
            {
                "event_type": s.event_type,
                "depth": s.depth,
                "announced": s.announced,
                "dropped": s.dropped,
            }
            for s in app.bridge.all_stats()
        ]

    @router.get("/events/{event_type}", response_model=QueueStatsResponse)
    async def get_event_queue(event_type: str) -> dict:
        """Depth and announced state of one event queue."""
        try:
            s = app.bridge.stats(event_type)
        except UnknownEventType as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {
            "event_type": s.event_type,
            "depth": s.depth,
            "announced": s.announced,
            "dropped": s.dropped,
        }

    return router
