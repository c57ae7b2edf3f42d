"""
Allowance reset for USDT on Ethereum.

USDT on mainnet refuses ``approve`` from one non-zero allowance to another,
so the wallet has to approve zero first and then the bridge amount.
"""

from typing import Callable, Union

from ...errors import InvalidIdentifier
from .caip import format_address_to_string, to_chain_id_int
from .constants import ETH_USDT_ADDRESS, METABRIDGE_ETHEREUM_ADDRESS, ChainIds
from .models import TxData

ERC20_APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)

AbiEncoder = Callable[[str, int], str]


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    return format_address_to_string(address)[2:].zfill(64)


def encode_erc20_approve(spender: str, amount: int) -> str:
    if amount < 0 or amount >= 2**256:
        raise ValueError(f"approve amount out of range: {amount}")
    return ERC20_APPROVE_SELECTOR + _encode_address(spender) + _encode_uint256(amount)


def is_eth_usdt(chain_id: Union[int, str], address: str) -> bool:
    """True only for the USDT contract on Ethereum mainnet.

    The chain id is compared by numeric value after normalization, so every
    spelling of chain 1 matches (``1``, ``"1"``, ``"0x1"``, ``"0x01"``, ``" 1 "``,
    ``"eip155:1"``). Other chains, unparsable chain ids and any other address
    do not. The address comparison ignores case.
    """

    try:
        on_mainnet = to_chain_id_int(chain_id) == ChainIds.MAINNET
    except InvalidIdentifier:
        return False
    return on_mainnet and isinstance(address, str) and address.lower() == ETH_USDT_ADDRESS.lower()


def get_eth_usdt_reset_data(encoder: AbiEncoder = encode_erc20_approve) -> str:
    """Calldata for ``approve(<metabridge>, 0)``; combine with the approval tx from the bridge API."""

    return encoder(METABRIDGE_ETHEREUM_ADDRESS, 0)


def build_reset_approval_tx(approval: TxData, encoder: AbiEncoder = encode_erc20_approve) -> TxData:
    return approval.with_data(get_eth_usdt_reset_data(encoder))


__all__ = [
    "AbiEncoder",
    "ERC20_APPROVE_SELECTOR",
    "build_reset_approval_tx",
    "encode_erc20_approve",
    "get_eth_usdt_reset_data",
    "is_eth_usdt",
]
