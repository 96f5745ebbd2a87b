"""Process-level tests for kuberestart.app.main exit statuses."""

from __future__ import annotations

import asyncio
import contextlib
from unittest.mock import AsyncMock, patch

from kuberestart.app import KubeRestartApp, main
from kuberestart.cluster.client import PodList, WatchItem
from kuberestart.errors import ClusterAPIError
from kuberestart.models.config import KubeRestartConfig, StatusConfig
from kuberestart.models.pods import EventType, WatchStatus


def _config() -> KubeRestartConfig:
    return KubeRestartConfig(status=StatusConfig(port=0))


class TestMain:
    async def test_watch_failure_exits_nonzero(self, fake_client, make_pod) -> None:
        fake_client.lists = [PodList(items=[make_pod()], resource_version="10")]
        fake_client.watches = [[WatchItem(type=EventType.ERROR, status=WatchStatus(code=500, reason="InternalError"))]]

        status = await asyncio.wait_for(main(_config(), client=fake_client), timeout=2.0)

        assert status == 1

    async def test_initial_list_failure_exits_nonzero(self, fake_client) -> None:
        fake_client.lists = [ClusterAPIError(403, "Forbidden")]

        status = await asyncio.wait_for(main(_config(), client=fake_client), timeout=2.0)

        assert status == 1

    async def test_client_startup_failure_exits_nonzero(self) -> None:
        with patch("kuberestart.cluster.client.connect", new=AsyncMock(side_effect=RuntimeError("no config"))):
            status = await asyncio.wait_for(main(_config()), timeout=2.0)

        assert status == 1


class TestApp:
    async def test_restart_flows_through_wired_components(self, fake_client, make_pod, watch_item) -> None:
        fake_client.lists = [PodList(items=[make_pod(restarts=0, resource_version="10")], resource_version="10")]
        fake_client.watches = [[watch_item(EventType.MODIFIED, make_pod(restarts=1, resource_version="11"))]]
        app = KubeRestartApp(_config(), client=fake_client)
        await app.start()

        run_task = asyncio.create_task(app.run())
        try:
            await asyncio.wait_for(fake_client.exhausted.wait(), timeout=2.0)
            assert app.monitor is not None
            await asyncio.wait_for(app.monitor._queue.join(), timeout=2.0)
        finally:
            run_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await run_task
            await app.stop()

        assert len(fake_client.events) == 1
        assert app.monitor.restarts_detected == 1
