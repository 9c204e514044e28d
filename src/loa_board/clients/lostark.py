"""
Minimal Lost Ark developer API client.

Only the siblings endpoint is used (see
:func:`~loa_board.memory.provider_cache.siblings_path`): it returns every
character on the same account, or JSON ``null`` for unknown names. Decoding
into records happens in the cache layer; this client only moves JSON.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from loa_board.config import core
from loa_board.errors import ProviderError

logger = logging.getLogger(__name__)


class LostArkClient:
    """Lazily opened :class:`aiohttp.ClientSession` with bearer auth."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key or core.LOSTARK_API_KEY
        self._base_url = (base_url or core.LOSTARK_API_BASE).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout or core.HTTP_TIMEOUT)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        return self._session

    async def get_json(self, path: str) -> Any:
        """GET ``path`` relative to the API base and decode the JSON body."""

        url = f"{self._base_url}{path}"
        try:
            async with self._get_session().get(url) as resp:
                if resp.status != 200:
                    detail = (await resp.text())[:200]
                    raise ProviderError(path, resp.status, detail)
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ProviderError(path, detail=str(exc) or type(exc).__name__) from exc

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["LostArkClient"]
