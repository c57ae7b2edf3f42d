"""
Bridge API integration

Talks to the bridge aggregation API through a caching fetch collaborator:
- fetch_bridge_feature_flags: remote flags, static default on any failure
- fetch_bridge_tokens: bridgeable tokens for one chain
- fetch_bridge_quotes: fresh quotes, malformed candidates dropped
- is_eth_usdt / get_eth_usdt_reset_data: USDT allowance reset on Ethereum

Usage:
    from metabridge.core.bridge import GenericQuoteRequest, fetch_bridge_quotes

    quotes = await fetch_bridge_quotes(
        GenericQuoteRequest(
            wallet_address="0x...",
            src_chain_id="0x1",
            dest_chain_id="0xa",
            src_token_address="0x0000000000000000000000000000000000000000",
            dest_token_address="0x0000000000000000000000000000000000000000",
            src_token_amount="1000000000000000",
            slippage=0.5,
        ),
        signal=abort_event,
    )
"""

from .allowance import build_reset_approval_tx, get_eth_usdt_reset_data, is_eth_usdt
from .caip import (
    format_address_to_string,
    format_chain_id_to_caip,
    format_chain_id_to_dec,
    format_chain_id_to_hex,
    to_chain_id_int,
)
from .feature_flags import (
    Fallback,
    Validated,
    default_feature_flags,
    fetch_bridge_feature_flags,
    resolve_bridge_feature_flags,
)
from .models import (
    BridgeAsset,
    BridgeFeatureFlags,
    ExtensionConfig,
    FeeData,
    GenericQuoteRequest,
    Quote,
    QuoteResponse,
    TokenDescriptor,
    TxData,
)
from .quotes import build_quote_query, fetch_bridge_quotes
from .tokens import fetch_bridge_tokens

__all__ = [
    "BridgeAsset",
    "BridgeFeatureFlags",
    "ExtensionConfig",
    "Fallback",
    "FeeData",
    "GenericQuoteRequest",
    "Quote",
    "QuoteResponse",
    "TokenDescriptor",
    "TxData",
    "Validated",
    "build_quote_query",
    "build_reset_approval_tx",
    "default_feature_flags",
    "fetch_bridge_feature_flags",
    "fetch_bridge_quotes",
    "fetch_bridge_tokens",
    "format_address_to_string",
    "format_chain_id_to_caip",
    "format_chain_id_to_dec",
    "format_chain_id_to_hex",
    "get_eth_usdt_reset_data",
    "is_eth_usdt",
    "resolve_bridge_feature_flags",
    "to_chain_id_int",
]
