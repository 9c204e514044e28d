"""
Periodic ticker for board refreshes.

:func:`startup` wraps a coroutine function in an endless sleep/run loop and
returns the :class:`asyncio.Task`; :func:`shutdown` cancels it. The first run
happens right away unless ``run_immediately`` is false. Failures inside a run
are logged and never stop the loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


async def startup(
    task_fn: Callable[[], Awaitable[object]],
    interval: float,
    *,
    run_immediately: bool = True,
) -> asyncio.Task:
    """Schedule ``task_fn`` every ``interval`` seconds and return the task handle."""

    async def _periodic() -> None:
        if not run_immediately:
            await asyncio.sleep(interval)
        while True:
            try:
                await task_fn()
            except Exception:
                logger.exception("Scheduled refresh failed")
            await asyncio.sleep(interval)

    logger.info("Starting board refresh ticker (interval=%ss)", interval)
    return asyncio.create_task(_periodic())


async def shutdown(task: asyncio.Task | None) -> None:
    """
    Cancel a ticker started with :func:`startup`.

    Tolerates ``None`` and swallows the resulting :class:`asyncio.CancelledError`.
    """

    if not task:
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:  # pragma: no cover - normal cancellation
        pass
