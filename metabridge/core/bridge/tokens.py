"""Bridgeable token lists per chain."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ...providers.fetch_with_cache import FetchWithCache, get_fetcher
from .caip import ChainIdInput, format_address_to_string, to_chain_id_int
from .constants import CACHE_REFRESH_TEN_MINUTES, DEFAULT_TOKEN_METADATA
from .endpoints import get_json, tokens_url
from .models import TokenDescriptor
from .validators import TOKEN_VALIDATORS, validate_response

logger = logging.getLogger(__name__)


def native_token_for_chain(chain_id: ChainIdInput) -> Optional[TokenDescriptor]:
    numeric_chain_id = to_chain_id_int(chain_id)
    metadata = DEFAULT_TOKEN_METADATA.get(numeric_chain_id)
    if metadata is None:
        return None
    return TokenDescriptor.from_payload(metadata, numeric_chain_id)


def is_default_token_symbol(symbol: str, chain_id: ChainIdInput) -> bool:
    metadata = DEFAULT_TOKEN_METADATA.get(to_chain_id_int(chain_id))
    return bool(metadata) and symbol.upper() == metadata["symbol"].upper()


def is_default_token_address(address: str, chain_id: ChainIdInput) -> bool:
    metadata = DEFAULT_TOKEN_METADATA.get(to_chain_id_int(chain_id))
    return bool(metadata) and address.lower() == metadata["address"].lower()


async def fetch_bridge_tokens(
    chain_id: ChainIdInput,
    fetcher: Optional[FetchWithCache] = None,
) -> Dict[str, TokenDescriptor]:
    """Tokens the bridge API can route on ``chain_id``, keyed by canonical address.

    The chain's native token always comes first. Remote entries that fail
    validation, or that repeat the native token by symbol or address, are skipped.
    """

    numeric_chain_id = to_chain_id_int(chain_id)
    fetcher = fetcher or get_fetcher()
    url = tokens_url(numeric_chain_id)

    tokens = await get_json(
        fetcher,
        url,
        cache_refresh_time=CACHE_REFRESH_TEN_MINUTES,
        function_name="fetchBridgeTokens",
    )

    transformed: Dict[str, TokenDescriptor] = {}
    native_token = native_token_for_chain(numeric_chain_id)
    if native_token:
        transformed[format_address_to_string(native_token.address)] = native_token

    if not isinstance(tokens, list):
        logger.warning("Token list for chain %s is not a list: %s", numeric_chain_id, type(tokens).__name__)
        return transformed

    skipped = 0
    for token in tokens:
        # Shape check comes before any field access.
        if not validate_response(TOKEN_VALIDATORS, token, url, strict=False):
            skipped += 1
            continue
        if is_default_token_symbol(token["symbol"], numeric_chain_id) or is_default_token_address(
            token["address"], numeric_chain_id
        ):
            continue
        descriptor = TokenDescriptor.from_payload(token, numeric_chain_id)
        transformed[format_address_to_string(descriptor.address)] = descriptor

    if skipped:
        logger.info("Skipped %d malformed tokens for chain %s", skipped, numeric_chain_id)
    return transformed


__all__ = [
    "fetch_bridge_tokens",
    "is_default_token_address",
    "is_default_token_symbol",
    "native_token_for_chain",
]
