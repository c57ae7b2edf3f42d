"""Remote bridge feature flags with a static fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Union

from ...errors import BridgeError, InvalidIdentifier
from ...providers.fetch_with_cache import FetchWithCache, get_fetcher
from .caip import format_chain_id_to_caip
from .constants import (
    CACHE_REFRESH_TEN_MINUTES,
    FALLBACK_MAX_REFRESH_COUNT,
    FALLBACK_REFRESH_RATE_MS,
    BridgeFlag,
)
from .endpoints import feature_flags_url, get_json
from .models import BridgeFeatureFlags, ExtensionConfig
from .validators import FEATURE_FLAG_VALIDATORS, validate_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Validated:
    flags: BridgeFeatureFlags
    source: Literal["remote"] = "remote"


@dataclass(frozen=True)
class Fallback:
    flags: BridgeFeatureFlags
    reason: str
    source: Literal["fallback"] = "fallback"


FlagResolution = Union[Validated, Fallback]


def default_feature_flags() -> BridgeFeatureFlags:
    """Bridging disabled everywhere; passes the same validators as a remote payload."""

    return BridgeFeatureFlags(
        extension_config=ExtensionConfig(
            refresh_rate=FALLBACK_REFRESH_RATE_MS,
            max_refresh_count=FALLBACK_MAX_REFRESH_COUNT,
            support=False,
            chains={},
        )
    )


def _remap_chains(chains: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    # Raw keys are decimal chain ids; duplicates after remapping keep the last entry.
    return {format_chain_id_to_caip(chain_id): dict(config) for chain_id, config in chains.items()}


async def resolve_bridge_feature_flags(fetcher: Optional[FetchWithCache] = None) -> FlagResolution:
    """Fetch, validate, and normalize the remote flags; fall back to the static default on any failure."""

    fetcher = fetcher or get_fetcher()
    url = feature_flags_url()

    try:
        raw_flags = await get_json(
            fetcher,
            url,
            cache_refresh_time=CACHE_REFRESH_TEN_MINUTES,
            function_name="fetchBridgeFeatureFlags",
        )
    except BridgeError as exc:
        logger.warning("Bridge feature flags unavailable, using defaults: %s", exc)
        return Fallback(default_feature_flags(), reason=f"fetch failed: {exc}")

    if not validate_response(FEATURE_FLAG_VALIDATORS, raw_flags, url):
        return Fallback(default_feature_flags(), reason="invalid payload")

    extension_config = raw_flags[BridgeFlag.EXTENSION_CONFIG.value]
    try:
        chains = _remap_chains(extension_config["chains"])
    except InvalidIdentifier as exc:
        logger.warning("Bridge feature flags contain an unparseable chain id: %s", exc)
        return Fallback(default_feature_flags(), reason=str(exc))

    return Validated(BridgeFeatureFlags(extension_config=ExtensionConfig.from_payload(extension_config, chains)))


async def fetch_bridge_feature_flags(fetcher: Optional[FetchWithCache] = None) -> BridgeFeatureFlags:
    resolution = await resolve_bridge_feature_flags(fetcher)
    return resolution.flags


__all__ = [
    "Fallback",
    "FlagResolution",
    "Validated",
    "default_feature_flags",
    "fetch_bridge_feature_flags",
    "resolve_bridge_feature_flags",
]
