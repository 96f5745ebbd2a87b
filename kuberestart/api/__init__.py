"""Status API layer for KubeRestart.

Exposes:
    create_app -- FastAPI application factory (/healthz, /api/v1/status, /metrics).
"""

from kuberestart.api.app import create_app

__all__ = ["create_app"]
