import asyncio

import aiohttp
from aiohttp import test_utils

from loa_board.clients import health


def test_liveness_routes_answer_ok():
    async def scenario():
        async with test_utils.TestClient(test_utils.TestServer(health.build_app())) as client:
            replies = []
            for path in ("/", "/healthz"):
                resp = await client.get(path)
                replies.append((resp.status, await resp.text()))
            return replies

    assert asyncio.run(scenario()) == [(200, "ok"), (200, "ok")]


def test_port_zero_disables_endpoint():
    async def scenario():
        runner = await health.start(0)
        await health.stop(runner)
        return runner

    assert asyncio.run(scenario()) is None


def test_start_and_stop_on_a_real_port():
    port = test_utils.unused_port()

    async def scenario():
        runner = await health.start(port, host="127.0.0.1")
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(f"http://127.0.0.1:{port}/healthz") as resp:
                    return resp.status, await resp.text()
        finally:
            await health.stop(runner)

    assert asyncio.run(scenario()) == (200, "ok")
