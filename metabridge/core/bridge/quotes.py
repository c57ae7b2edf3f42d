"""Bridge quote fetching and filtering."""

from __future__ import annotations

import asyncio
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Union

from ...providers.fetch_with_cache import FetchWithCache, get_fetcher
from .caip import format_address_to_string, format_chain_id_to_dec
from .constants import FeeType
from .endpoints import get_json, quote_url
from .models import GenericQuoteRequest, QuoteResponse
from .validators import (
    FEE_DATA_VALIDATORS,
    QUOTE_RESPONSE_VALIDATORS,
    QUOTE_VALIDATORS,
    TOKEN_VALIDATORS,
    TX_DATA_VALIDATORS,
    validate_response,
)

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(r"^[0-9]+$")


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _format_slippage(value: Union[int, float, Decimal, str]) -> str:
    """Plain decimal text: ``0.5`` -> ``"0.5"``, ``1.0`` -> ``"1"``."""

    if isinstance(value, bool):
        raise ValueError(f"Invalid slippage: {value!r}")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid slippage: {value!r}") from exc
    if not number.is_finite() or number < 0:
        raise ValueError(f"Invalid slippage: {value!r}")
    return format(number.normalize(), "f")


def _format_amount(value: Union[int, str]) -> str:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return str(value)
    if isinstance(value, str) and _AMOUNT_RE.fullmatch(value.strip()):
        return value.strip()
    raise ValueError(f"Invalid source token amount: {value!r}")


def build_quote_query(request: GenericQuoteRequest) -> Dict[str, str]:
    """Shape a wallet quote request into the all-string query the bridge API expects."""

    return {
        "walletAddress": format_address_to_string(request.wallet_address),
        "srcChainId": format_chain_id_to_dec(request.src_chain_id),
        "destChainId": format_chain_id_to_dec(request.dest_chain_id),
        "srcTokenAddress": format_address_to_string(request.src_token_address),
        "destTokenAddress": format_address_to_string(request.dest_token_address),
        "srcTokenAmount": _format_amount(request.src_token_amount),
        "slippage": _format_slippage(request.slippage),
        "insufficientBal": _format_bool(request.insufficient_bal),
        "resetApproval": _format_bool(request.reset_approval),
    }


def is_valid_quote_response(candidate: Any, source: str) -> bool:
    """Check a candidate and each nested sub-object, in order, stopping at the first failure."""

    if not validate_response(QUOTE_RESPONSE_VALIDATORS, candidate, source):
        return False

    quote = candidate["quote"]
    if not validate_response(QUOTE_VALIDATORS, quote, source):
        return False
    # Asset metadata is token-list data and grows fields over time.
    if not validate_response(TOKEN_VALIDATORS, quote["srcAsset"], source, strict=False):
        return False
    if not validate_response(TOKEN_VALIDATORS, quote["destAsset"], source, strict=False):
        return False
    if not validate_response(TX_DATA_VALIDATORS, candidate["trade"], source):
        return False
    if not validate_response(FEE_DATA_VALIDATORS, quote["feeData"].get(FeeType.METABRIDGE.value), source):
        return False

    # Routes that need no allowance come back without an approval.
    approval = candidate.get("approval")
    if approval is not None and not validate_response(TX_DATA_VALIDATORS, approval, source):
        return False
    return True


def filter_quote_responses(candidates: Iterable[Any], source: str) -> List[QuoteResponse]:
    return [
        QuoteResponse.from_payload(candidate)
        for candidate in candidates
        if is_valid_quote_response(candidate, source)
    ]


async def fetch_bridge_quotes(
    request: GenericQuoteRequest,
    signal: Optional[asyncio.Event] = None,
    *,
    fetcher: Optional[FetchWithCache] = None,
) -> List[QuoteResponse]:
    """Fetch fresh quotes for ``request`` and keep only the fully well-formed ones.

    Raises :class:`~metabridge.errors.Cancelled` if ``signal`` is set before the
    quotes are returned, and :class:`~metabridge.errors.TransportFailure` if the
    fetch itself fails.
    """

    query = build_quote_query(request)
    url = quote_url(query)
    fetcher = fetcher or get_fetcher()

    quotes = await get_json(
        fetcher,
        url,
        cache_refresh_time=0,
        function_name="fetchBridgeQuotes",
        signal=signal,
    )

    if not isinstance(quotes, list):
        logger.warning("Quote response is not a list: %s", type(quotes).__name__)
        return []

    filtered = filter_quote_responses(quotes, url)
    if len(filtered) != len(quotes):
        logger.info("Dropped %d of %d bridge quotes", len(quotes) - len(filtered), len(quotes))
    return filtered


__all__ = [
    "build_quote_query",
    "fetch_bridge_quotes",
    "filter_quote_responses",
    "is_valid_quote_response",
]
