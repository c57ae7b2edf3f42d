"""URLs, headers and the shared GET helper for the bridge aggregation API."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

import httpx

from ...config import settings
from ...errors import Cancelled, TransportFailure
from ...providers.fetch_with_cache import CacheOptions, FetchOptions, FetchWithCache, run_abortable
from .caip import ChainIdInput, format_chain_id_to_dec


def client_id_header() -> Dict[str, str]:
    return {"X-Client-Id": settings.bridge_client_id}


def feature_flags_url() -> str:
    return f"{settings.bridge_api_url}/getAllFeatureFlags"


def tokens_url(chain_id: ChainIdInput) -> str:
    return str(httpx.URL(f"{settings.bridge_api_url}/getTokens", params={"chainId": format_chain_id_to_dec(chain_id)}))


def quote_url(query: Mapping[str, str]) -> str:
    return str(httpx.URL(f"{settings.bridge_api_url}/getQuote", params=dict(query)))


async def get_json(
    fetcher: FetchWithCache,
    url: str,
    *,
    cache_refresh_time: int,
    function_name: str,
    signal: Optional[asyncio.Event] = None,
) -> Any:
    """GET ``url`` through the fetch collaborator.

    Raises :class:`Cancelled` when ``signal`` is raised at any point, and
    :class:`TransportFailure` for every other collaborator failure.
    """

    try:
        payload = await run_abortable(
            fetcher.fetch(
                url,
                FetchOptions(method="GET", headers=client_id_header(), signal=signal),
                CacheOptions(cache_refresh_time=cache_refresh_time),
                function_name,
            ),
            signal,
            label=function_name,
        )
    except (Cancelled, TransportFailure):
        raise
    except Exception as exc:
        raise TransportFailure(f"{function_name} failed: {exc}", url=url) from exc

    # A response that lands after the abort is stale; never hand it back.
    if signal is not None and signal.is_set():
        raise Cancelled(f"{function_name} aborted")
    return payload


__all__ = ["client_id_header", "feature_flags_url", "get_json", "quote_url", "tokens_url"]
