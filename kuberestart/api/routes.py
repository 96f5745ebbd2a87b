"""Status API routes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from kuberestart.api.schemas import HealthResponse, StatusResponse
from kuberestart.collector.watcher import WatchState

router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
async def healthz(request: Request) -> JSONResponse:
    """503 once the watch coordinator has failed; 200 otherwise."""
    coordinator = request.app.state.coordinator
    if coordinator.state == WatchState.FAILED:
        return JSONResponse(status_code=503, content=HealthResponse(status="failed").model_dump())
    return JSONResponse(status_code=200, content=HealthResponse(status="ok").model_dump())


@router.get("/api/v1/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    from kuberestart import __version__

    coordinator = request.app.state.coordinator
    monitor = request.app.state.monitor
    return StatusResponse(
        version=__version__,
        watch_state=str(coordinator.state),
        resource_version=coordinator.resource_version,
        relist_count=coordinator.relist_count,
        events_delivered=coordinator.delivered,
        tracked_pods=len(monitor.store),
        restarts_detected=monitor.restarts_detected,
        event_reason=request.app.state.event_reason,
    )
