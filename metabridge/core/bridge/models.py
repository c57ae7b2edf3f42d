"""Typed models used by the bridge subsystem.

Models are only built from payloads that already passed their validator set,
so ``from_payload`` constructors index required keys directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .constants import BridgeFeatureFlagsKey, FeeType
from .validators import FEE_DATA_VALIDATORS


@dataclass(frozen=True)
class GenericQuoteRequest:
    """Wallet-side quote request before it is shaped for the bridge API."""

    wallet_address: str
    src_chain_id: Union[int, str]
    dest_chain_id: Union[int, str]
    src_token_address: str
    dest_token_address: str
    src_token_amount: Union[int, str]
    slippage: Union[int, float, Decimal, str]
    insufficient_bal: bool = False
    reset_approval: bool = False


@dataclass(frozen=True)
class ExtensionConfig:
    refresh_rate: int
    max_refresh_count: int
    support: bool
    chains: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], chains: Dict[str, Dict[str, Any]]) -> "ExtensionConfig":
        return cls(
            refresh_rate=data["refreshRate"],
            max_refresh_count=data["maxRefreshCount"],
            support=data["support"],
            chains=chains,
        )

    def is_chain_supported(self, caip_chain_id: str, *, as_source: bool = True) -> bool:
        """Whether the chain is enabled as a bridge source (or destination)."""

        if not self.support:
            return False
        chain = self.chains.get(caip_chain_id)
        if not chain:
            return False
        return bool(chain.get("isActiveSrc" if as_source else "isActiveDest"))

    def active_src_chains(self) -> List[str]:
        return [chain_id for chain_id in self.chains if self.is_chain_supported(chain_id, as_source=True)]

    def active_dest_chains(self) -> List[str]:
        return [chain_id for chain_id in self.chains if self.is_chain_supported(chain_id, as_source=False)]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "refreshRate": self.refresh_rate,
            "maxRefreshCount": self.max_refresh_count,
            "support": self.support,
            "chains": {chain_id: dict(config) for chain_id, config in self.chains.items()},
        }


@dataclass(frozen=True)
class BridgeFeatureFlags:
    extension_config: ExtensionConfig

    def to_dict(self) -> Dict[str, Any]:
        return {BridgeFeatureFlagsKey.EXTENSION_CONFIG.value: self.extension_config.to_payload()}


@dataclass(frozen=True)
class TokenDescriptor:
    """Token offered for bridging on one chain. ``address`` keeps the API's casing."""

    address: str
    symbol: str
    decimals: int
    chain_id: int
    name: Optional[str] = None
    icon_url: Optional[str] = None
    aggregators: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], chain_id: int) -> "TokenDescriptor":
        return cls(
            address=data["address"],
            symbol=data["symbol"],
            decimals=data["decimals"],
            chain_id=chain_id,
            name=data.get("name"),
            icon_url=data.get("iconUrl") or data.get("icon"),
            aggregators=tuple(data.get("aggregators") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "chainId": self.chain_id,
            "name": self.name,
            "iconUrl": self.icon_url,
            "aggregators": list(self.aggregators),
        }


@dataclass(frozen=True)
class BridgeAsset:
    address: str
    symbol: str
    decimals: int
    chain_id: Optional[int] = None
    name: Optional[str] = None
    icon: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "BridgeAsset":
        return cls(
            address=data["address"],
            symbol=data["symbol"],
            decimals=data["decimals"],
            chain_id=data.get("chainId"),
            name=data.get("name"),
            icon=data.get("icon") or data.get("iconUrl"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "chainId": self.chain_id,
            "name": self.name,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class FeeData:
    amount: str
    asset: BridgeAsset

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "FeeData":
        return cls(amount=data["amount"], asset=BridgeAsset.from_payload(data["asset"]))

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "asset": self.asset.to_dict()}


@dataclass(frozen=True)
class TxData:
    """Unsigned transaction returned by the bridge API."""

    chain_id: int
    to: str
    from_address: str
    value: str
    data: str
    gas_limit: Optional[int] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "TxData":
        return cls(
            chain_id=data["chainId"],
            to=data["to"],
            from_address=data["from"],
            value=data["value"],
            data=data["data"],
            gas_limit=data.get("gasLimit"),
        )

    def with_data(self, data: str) -> "TxData":
        return replace(self, data=data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "to": self.to,
            "from": self.from_address,
            "value": self.value,
            "data": self.data,
            "gasLimit": self.gas_limit,
        }


@dataclass(frozen=True)
class Quote:
    request_id: str
    src_chain_id: int
    src_asset: BridgeAsset
    src_token_amount: str
    dest_chain_id: int
    dest_asset: BridgeAsset
    dest_token_amount: str
    fee_data: Dict[str, FeeData]
    bridge_id: str
    bridges: Tuple[str, ...] = ()
    steps: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Quote":
        # Only fee entries that hold up are kept; the metabridge entry was checked upstream.
        fee_data = {
            str(fee_type): FeeData.from_payload(entry)
            for fee_type, entry in data["feeData"].items()
            if FEE_DATA_VALIDATORS.find_failure(entry, source="", strict=False) is None
        }
        return cls(
            request_id=data["requestId"],
            src_chain_id=data["srcChainId"],
            src_asset=BridgeAsset.from_payload(data["srcAsset"]),
            src_token_amount=data["srcTokenAmount"],
            dest_chain_id=data["destChainId"],
            dest_asset=BridgeAsset.from_payload(data["destAsset"]),
            dest_token_amount=data["destTokenAmount"],
            fee_data=fee_data,
            bridge_id=data["bridgeId"],
            bridges=tuple(data["bridges"]),
            steps=tuple(dict(step) for step in data.get("steps") or ()),
        )

    @property
    def metabridge_fee(self) -> FeeData:
        return self.fee_data[FeeType.METABRIDGE.value]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestId": self.request_id,
            "srcChainId": self.src_chain_id,
            "srcAsset": self.src_asset.to_dict(),
            "srcTokenAmount": self.src_token_amount,
            "destChainId": self.dest_chain_id,
            "destAsset": self.dest_asset.to_dict(),
            "destTokenAmount": self.dest_token_amount,
            "feeData": {fee_type: fee.to_dict() for fee_type, fee in self.fee_data.items()},
            "bridgeId": self.bridge_id,
            "bridges": list(self.bridges),
            "steps": [dict(step) for step in self.steps],
        }


@dataclass(frozen=True)
class QuoteResponse:
    quote: Quote
    trade: TxData
    estimated_processing_time_in_seconds: float
    approval: Optional[TxData] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "QuoteResponse":
        approval = data.get("approval")
        return cls(
            quote=Quote.from_payload(data["quote"]),
            trade=TxData.from_payload(data["trade"]),
            estimated_processing_time_in_seconds=data["estimatedProcessingTimeInSeconds"],
            approval=TxData.from_payload(approval) if approval else None,
        )

    @property
    def requires_approval(self) -> bool:
        return self.approval is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quote": self.quote.to_dict(),
            "trade": self.trade.to_dict(),
            "approval": self.approval.to_dict() if self.approval else None,
            "estimatedProcessingTimeInSeconds": self.estimated_processing_time_in_seconds,
        }
