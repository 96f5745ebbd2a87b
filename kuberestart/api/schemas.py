"""Response models for the status API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str


class StatusResponse(BaseModel):
    """Point-in-time view of the watch coordinator and consumer loop."""

    version: str
    watch_state: str
    resource_version: str
    relist_count: int
    events_delivered: int
    tracked_pods: int
    restarts_detected: int
    event_reason: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
