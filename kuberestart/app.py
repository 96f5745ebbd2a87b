"""Application bootstrap for KubeRestart.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: logging -> K8s client -> queue/store/emitter -> monitor
              -> watch coordinator -> status API

The process runs until the watch fails (exit status 1) or it is terminated
externally (SIGTERM/SIGINT, exit status 0).
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from kuberestart.cache.pod_store import PodStore
from kuberestart.collector.watcher import WatchCoordinator, new_event_queue
from kuberestart.config import load_config
from kuberestart.errors import WatchFailedError
from kuberestart.models.config import KubeRestartConfig
from kuberestart.monitor import RestartMonitor
from kuberestart.notifications.emitter import EventEmitter
from kuberestart.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from kuberestart.cluster.client import ClusterClient

_SHUTDOWN_GRACE_SECONDS = 10


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeRestartApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``client`` may be injected (tests); otherwise one is built from
    ``config.cluster`` during ``start()``.
    """

    def __init__(
        self,
        config: KubeRestartConfig | None = None,
        client: ClusterClient | None = None,
    ) -> None:
        self.config = config or load_config()
        self._client = client
        self._owns_client = client is None

        self.coordinator: WatchCoordinator | None = None
        self.monitor: RestartMonitor | None = None
        self._status_server: object | None = None
        self._background_tasks: list[asyncio.Task[None]] = []
        self._log: structlog.stdlib.BoundLogger = get_logger("app")

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Build every component.  Raises _ComponentError on failure."""
        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.info("kuberestart_starting", version=_kuberestart_version(), reason=self.config.event.reason)

        await self._start_client()

        assert self._client is not None
        queue = new_event_queue()
        emitter = EventEmitter(
            self._client,
            reason=self.config.event.reason,
            component=self.config.event.component,
        )
        self.monitor = RestartMonitor(queue, PodStore(), emitter)
        self.coordinator = WatchCoordinator(self._client, queue)

        await self._start_status_api()

    async def _start_client(self) -> None:
        if self._client is not None:
            return
        self._log.debug("starting_k8s_client")
        try:
            from kuberestart.cluster.client import connect

            self._client = await connect(self.config.cluster)
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    async def _start_status_api(self) -> None:
        """Serve /healthz, /api/v1/status and /metrics.  Skipped when port is 0."""
        port = self.config.status.port
        if port == 0:
            self._log.info("status_api_disabled")
            return
        try:
            import uvicorn

            from kuberestart.api import create_app

            fastapi_app = create_app(
                coordinator=self.coordinator,
                monitor=self.monitor,
                event_reason=self.config.event.reason,
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="status-server")
            self._background_tasks.append(task)
            self._status_server = server
            self._log.info("status_api_started", port=port)
        except Exception as exc:
            raise _ComponentError("status_api", exc) from exc

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Start the watch coordinator and drain events until a fatal error.

        Raises:
            WatchFailedError: the pod watch failed with a non-recoverable error.
        """
        assert self.coordinator is not None
        assert self.monitor is not None
        await self.coordinator.start()
        await self.monitor.run()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop the coordinator, background tasks and client; never raises."""
        if self.coordinator is not None:
            await self.coordinator.stop()

        if self._status_server is not None:
            self._status_server.should_exit = True  # type: ignore[attr-defined]
        for task in self._background_tasks:
            try:
                await asyncio.wait_for(task, timeout=_SHUTDOWN_GRACE_SECONDS)
            except TimeoutError:
                self._log.warning("status_api_stop_timed_out", timeout=_SHUTDOWN_GRACE_SECONDS)
            except Exception as exc:
                self._log.error("status_api_stop_failed", error=str(exc))
        self._background_tasks.clear()

        if self._owns_client and self._client is not None:
            close = getattr(self._client, "close", None)
            if close is not None:
                try:
                    await close()
                except Exception as exc:
                    self._log.debug("k8s_client_close_failed", error=str(exc))
        self._log.info("kuberestart_stopped")


def _kuberestart_version() -> str:
    from kuberestart import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: KubeRestartConfig | None = None, client: ClusterClient | None = None) -> int:
    """Run the monitor until failure or a termination signal; return the exit status."""
    app = KubeRestartApp(config, client=client)
    loop = asyncio.get_running_loop()
    run_task: asyncio.Task[None] | None = None

    def _request_shutdown() -> None:
        if run_task is not None and not run_task.done():
            run_task.cancel()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    log = get_logger("app")
    try:
        await app.start()
        run_task = asyncio.create_task(app.run(), name="restart-monitor")
        await run_task
    except _ComponentError as exc:
        log.critical("fatal_startup_error", component=exc.component, error=str(exc.cause))
        return 1
    except WatchFailedError as exc:
        log.critical("fatal_watch_error", error=str(exc.cause))
        return 1
    except asyncio.CancelledError:
        if run_task is None or not run_task.cancelled():
            raise
        log.info("shutdown_requested")
        return 0
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
        await app.stop()
    return 0
