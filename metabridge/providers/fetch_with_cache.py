"""Cache-aware HTTP fetch used by the bridge core.

The bridge modules only depend on the :class:`FetchWithCache` protocol;
:class:`CachingFetcher` is the default ``httpx`` implementation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Mapping, Optional, Protocol

import httpx

from ..cache import TTLCache
from ..config import settings
from ..errors import Cancelled, TransportFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOptions:
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    signal: Optional[asyncio.Event] = None


@dataclass(frozen=True)
class CacheOptions:
    # Milliseconds; 0 disables caching for the call.
    cache_refresh_time: int = 0


class FetchWithCache(Protocol):
    async def fetch(
        self,
        url: str,
        fetch_options: FetchOptions,
        cache_options: CacheOptions,
        function_name: str,
    ) -> Any:
        ...


async def run_abortable(awaitable: Awaitable[Any], signal: Optional[asyncio.Event], *, label: str) -> Any:
    """Await ``awaitable`` unless ``signal`` is raised first, in which case abort it and raise Cancelled."""

    if signal is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    if signal.is_set():
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise Cancelled(f"{label} aborted before it started")

    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise Cancelled(f"{label} aborted")


class CachingFetcher:
    """GET/POST JSON through ``httpx`` with an in-memory TTL cache in front.

    There is no retry loop here; a failed request surfaces once as
    :class:`TransportFailure`.
    """

    def __init__(
        self,
        *,
        cache: Optional[TTLCache] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._cache = cache or TTLCache(
            default_ttl=settings.cache_ttl_seconds,
            max_size=settings.max_cache_size,
        )
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    @staticmethod
    def _cache_key(method: str, url: str) -> str:
        return f"cachedFetch:{method.upper()}:{url}"

    async def fetch(
        self,
        url: str,
        fetch_options: Optional[FetchOptions] = None,
        cache_options: Optional[CacheOptions] = None,
        function_name: str = "fetch",
    ) -> Any:
        fetch_options = fetch_options or FetchOptions()
        cache_options = cache_options or CacheOptions()
        use_cache = cache_options.cache_refresh_time > 0
        cache_key = self._cache_key(fetch_options.method, url)

        if use_cache:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                logger.debug("%s served from cache: %s", function_name, url)
                return cached

        payload = await run_abortable(
            self._request(fetch_options.method, url, fetch_options.headers, function_name),
            fetch_options.signal,
            label=function_name,
        )

        if use_cache:
            await self._cache.set(cache_key, payload, ttl=cache_options.cache_refresh_time / 1000)
        return payload

    async def _request(self, method: str, url: str, headers: Mapping[str, str], function_name: str) -> Any:
        merged_headers = {"Accept": "application/json", **headers}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.request(method, url, headers=merged_headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning("%s failed with status %s: %s", function_name, status_code, url)
            raise TransportFailure(
                f"{function_name} failed with status {status_code}",
                url=url,
                status_code=status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("%s request error: %s", function_name, exc)
            raise TransportFailure(f"{function_name} could not reach {url}", url=url) from exc
        except ValueError as exc:
            # response.json() on a non-JSON body
            raise TransportFailure(f"{function_name} returned a non-JSON body", url=url) from exc

    async def clear(self) -> None:
        await self._cache.clear()


_default_fetcher: Optional[CachingFetcher] = None


def get_fetcher() -> CachingFetcher:
    """Get the process-wide CachingFetcher instance."""
    global _default_fetcher
    if _default_fetcher is None:
        _default_fetcher = CachingFetcher()
    return _default_fetcher


__all__ = [
    "CacheOptions",
    "CachingFetcher",
    "FetchOptions",
    "FetchWithCache",
    "get_fetcher",
    "run_abortable",
]
