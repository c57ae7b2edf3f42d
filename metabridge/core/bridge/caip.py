"""Conversions between the chain id and address formats used by the bridge API and the wallet.

Chain ids arrive as ints, ``0x``-prefixed hex strings, decimal strings, or
CAIP-2 strings (``eip155:1``). Addresses arrive as checksummed or lower-case
hex, CAIP-10 account ids (``eip155:1:0xabc...``), CAIP-19 asset ids, or
base58 Solana addresses.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Union

from ...errors import InvalidIdentifier
from .constants import (
    EIP155_NAMESPACE,
    NATIVE_PLACEHOLDER,
    SOLANA_CHAIN_ID,
    SOLANA_MAINNET_CAIP,
    SOLANA_NAMESPACE,
)

ChainIdInput = Union[int, str]

_BASE58_ALPHABET = set("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")

_HEX_CHAIN_ID_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")
_DEC_CHAIN_ID_RE = re.compile(r"^[0-9]+$")
_CAIP2_RE = re.compile(r"^(?P<namespace>[-a-z0-9]{3,8}):(?P<reference>[-_a-zA-Z0-9]{1,32})$")
_CAIP10_RE = re.compile(
    r"^(?P<chain>[-a-z0-9]{3,8}:[-_a-zA-Z0-9]{1,32}):(?P<address>[-.%a-zA-Z0-9]{1,128})$"
)
_CAIP19_RE = re.compile(
    r"^(?P<chain>[-a-z0-9]{3,8}:[-_a-zA-Z0-9]{1,32})/"
    r"(?P<asset_namespace>[-a-z0-9]{3,8}):(?P<asset_reference>[-.%a-zA-Z0-9]{1,128})$"
)
_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def _parse_caip_chain_id(value: str) -> int:
    match = _CAIP2_RE.fullmatch(value)
    if not match:
        raise InvalidIdentifier(value, "chain id")
    if value == SOLANA_MAINNET_CAIP:
        return SOLANA_CHAIN_ID
    if match.group("namespace") != EIP155_NAMESPACE or not _DEC_CHAIN_ID_RE.fullmatch(match.group("reference")):
        raise InvalidIdentifier(value, "chain id")
    return int(match.group("reference"))


def to_chain_id_int(chain_id: ChainIdInput) -> int:
    """Return the integer chain id behind any supported surface form."""

    # bool is an int subclass; True is not chain 1
    if isinstance(chain_id, bool):
        raise InvalidIdentifier(chain_id, "chain id")
    if isinstance(chain_id, int):
        if chain_id < 0:
            raise InvalidIdentifier(chain_id, "chain id")
        return chain_id
    if not isinstance(chain_id, str):
        raise InvalidIdentifier(chain_id, "chain id")

    value = chain_id.strip()
    if _HEX_CHAIN_ID_RE.fullmatch(value):
        return int(value, 16)
    if _DEC_CHAIN_ID_RE.fullmatch(value):
        return int(value)
    return _parse_caip_chain_id(value)


def format_chain_id_to_caip(chain_id: ChainIdInput) -> str:
    """Canonical CAIP-2 form, e.g. ``"0x1"`` -> ``"eip155:1"``."""

    numeric = to_chain_id_int(chain_id)
    if numeric == SOLANA_CHAIN_ID:
        return SOLANA_MAINNET_CAIP
    return f"{EIP155_NAMESPACE}:{numeric}"


def format_chain_id_to_dec(chain_id: ChainIdInput) -> str:
    """Decimal string form expected by the bridge API query parameters."""

    return str(to_chain_id_int(chain_id))


def format_chain_id_to_hex(chain_id: ChainIdInput) -> str:
    return hex(to_chain_id_int(chain_id))


@lru_cache(maxsize=256)
def is_valid_solana_address(address: str) -> bool:
    if not address:
        return False
    length = len(address)
    if length < 32 or length > 44:
        return False
    return all(ch in _BASE58_ALPHABET for ch in address)


def is_evm_address(address: str) -> bool:
    return isinstance(address, str) and bool(_EVM_ADDRESS_RE.fullmatch(address))


def _format_asset_id(match: "re.Match[str]", original: str) -> str:
    asset_namespace = match.group("asset_namespace")
    reference = match.group("asset_reference")
    if asset_namespace == "slip44":
        if match.group("chain").startswith(f"{EIP155_NAMESPACE}:"):
            return NATIVE_PLACEHOLDER
        raise InvalidIdentifier(original, "address")
    if asset_namespace in ("erc20", "token"):
        return format_address_to_string(reference)
    raise InvalidIdentifier(original, "address")


def format_address_to_string(address: str) -> str:
    """Canonical comparison form of an address.

    EVM addresses are lower-cased. Base58 (Solana) addresses are case-sensitive
    and come back unchanged. Applying this twice is the same as applying it once.
    """

    if not isinstance(address, str):
        raise InvalidIdentifier(address, "address")
    value = address.strip()

    asset_match = _CAIP19_RE.fullmatch(value)
    if asset_match:
        return _format_asset_id(asset_match, address)

    account_match = _CAIP10_RE.fullmatch(value)
    if account_match:
        chain = account_match.group("chain")
        if not (chain.startswith(f"{EIP155_NAMESPACE}:") or chain.startswith(f"{SOLANA_NAMESPACE}:")):
            raise InvalidIdentifier(address, "address")
        return format_address_to_string(account_match.group("address"))

    if _EVM_ADDRESS_RE.fullmatch(value):
        return value.lower()
    if is_valid_solana_address(value):
        return value
    raise InvalidIdentifier(address, "address")


def is_native_address(address: str) -> bool:
    """True for the zero-address sentinel in any accepted form."""

    try:
        return format_address_to_string(address) == NATIVE_PLACEHOLDER
    except InvalidIdentifier:
        return False


__all__ = [
    "ChainIdInput",
    "format_address_to_string",
    "format_chain_id_to_caip",
    "format_chain_id_to_dec",
    "format_chain_id_to_hex",
    "is_evm_address",
    "is_native_address",
    "is_valid_solana_address",
    "to_chain_id_int",
]
