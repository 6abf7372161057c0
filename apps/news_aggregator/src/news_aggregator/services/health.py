"""Health and metrics HTTP server for loop mode."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from aiohttp import web

from news_aggregator.config import HealthSettings
from news_aggregator.logging import get_logger
from news_aggregator.services.metrics import metrics

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4"

StatusProvider = Callable[[], dict[str, Any]]


class HealthServer:
    def __init__(self, settings: HealthSettings, *, status_provider: StatusProvider | None = None) -> None:
        self._settings = settings
        self._status_provider = status_provider
        self._runner: web.AppRunner | None = None
        self._log = get_logger(__name__)

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/metrics", self._handle_metrics)
        return app

    async def start(self) -> None:
        runner = web.AppRunner(self.build_app())
        await runner.setup()
        site = web.TCPSite(runner, host=self._settings.host, port=self._settings.port)
        await site.start()
        self._runner = runner
        self._log.info("health_server_started", host=self._settings.host, port=self._settings.port)

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    async def _handle_health(self, request: web.Request) -> web.Response:
        payload: dict[str, Any] = {"status": "ok"}
        if self._status_provider is not None:
            payload.update(self._status_provider())
        return web.json_response(payload)

    @staticmethod
    async def _handle_metrics(request: web.Request) -> web.Response:
        return web.Response(text=metrics.render(), content_type=PROMETHEUS_CONTENT_TYPE)
