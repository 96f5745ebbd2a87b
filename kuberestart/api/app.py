"""FastAPI application factory for the KubeRestart status endpoint.

Usage::

    from kuberestart.api.app import create_app

    app = create_app(coordinator=coordinator, monitor=monitor)
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from kuberestart.api.routes import router
from kuberestart.api.schemas import ErrorResponse

_log = structlog.get_logger(component="api.app")


def create_app(coordinator: Any, monitor: Any, event_reason: str = "ContainerRestart") -> FastAPI:
    """Create the status API.

    Args:
        coordinator:  WatchCoordinator (state, cursor, relist count).
        monitor:      RestartMonitor (store size, restarts detected).
        event_reason: Configured event reason, reported by /api/v1/status.
    """
    from kuberestart import __version__

    app = FastAPI(
        title="KubeRestart",
        summary="Kubernetes container restart monitor",
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )

    app.state.coordinator = coordinator
    app.state.monitor = monitor
    app.state.event_reason = event_reason

    app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        _log.error("unhandled_exception", path=str(request.url.path), error=str(exc))
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="INTERNAL_ERROR", detail="An unexpected error occurred.").model_dump(),
        )

    return app
