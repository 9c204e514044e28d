"""Tiny HTTP liveness endpoint so hosting platforms keep the process alive."""

from __future__ import annotations

import logging

from aiohttp import web

logger = logging.getLogger(__name__)


async def _ok(_: web.Request) -> web.Response:
    return web.Response(text="ok")


def build_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", _ok)
    app.router.add_get("/healthz", _ok)
    return app


async def start(port: int, host: str = "0.0.0.0") -> web.AppRunner | None:
    """Serve the liveness app on ``port``. ``port <= 0`` disables it."""

    if port <= 0:
        logger.info("Liveness endpoint disabled")
        return None

    runner = web.AppRunner(build_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("Liveness endpoint listening on %s:%d", host, port)
    return runner


async def stop(runner: web.AppRunner | None) -> None:
    if runner is not None:
        await runner.cleanup()
