from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.bridge import (
    GenericQuoteRequest,
    fetch_bridge_quotes,
    fetch_bridge_tokens,
    format_chain_id_to_caip,
    get_eth_usdt_reset_data,
    is_eth_usdt,
    resolve_bridge_feature_flags,
)
from ..errors import TransportFailure
from ..providers.fetch_with_cache import FetchWithCache, get_fetcher

router = APIRouter(prefix="/bridge")


def get_bridge_fetcher() -> FetchWithCache:
    return get_fetcher()


class QuoteRequestBody(BaseModel):
    walletAddress: str = Field(description="Wallet that will sign the bridge transaction")
    srcChainId: Union[int, str] = Field(description="Source chain id (int, hex, decimal or CAIP-2)")
    destChainId: Union[int, str] = Field(description="Destination chain id (int, hex, decimal or CAIP-2)")
    srcTokenAddress: str = Field(description="Source token address (zero address for native)")
    destTokenAddress: str = Field(description="Destination token address (zero address for native)")
    srcTokenAmount: str = Field(description="Amount in the source token's smallest unit")
    slippage: float = Field(ge=0, description="Slippage tolerance in percent")
    insufficientBal: bool = Field(default=False, description="Quote even if the wallet balance is too low")
    resetApproval: bool = Field(default=False, description="Account for an allowance reset in the quote")

    def to_request(self) -> GenericQuoteRequest:
        return GenericQuoteRequest(
            wallet_address=self.walletAddress,
            src_chain_id=self.srcChainId,
            dest_chain_id=self.destChainId,
            src_token_address=self.srcTokenAddress,
            dest_token_address=self.destTokenAddress,
            src_token_amount=self.srcTokenAmount,
            slippage=self.slippage,
            insufficient_bal=self.insufficientBal,
            reset_approval=self.resetApproval,
        )


@router.get("/feature-flags")
async def get_feature_flags(fetcher: FetchWithCache = Depends(get_bridge_fetcher)) -> Dict[str, Any]:
    resolution = await resolve_bridge_feature_flags(fetcher)
    return {"source": resolution.source, **resolution.flags.to_dict()}


@router.get("/tokens/{chain_id}")
async def get_bridge_tokens(chain_id: str, fetcher: FetchWithCache = Depends(get_bridge_fetcher)) -> Dict[str, Any]:
    try:
        tokens = await fetch_bridge_tokens(chain_id, fetcher)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch bridge tokens: {e}")

    return {
        "chainId": format_chain_id_to_caip(chain_id),
        "tokens": {address: token.to_dict() for address, token in tokens.items()},
    }


@router.post("/quotes")
async def get_bridge_quotes(
    body: QuoteRequestBody,
    fetcher: FetchWithCache = Depends(get_bridge_fetcher),
) -> Dict[str, Any]:
    try:
        quotes = await fetch_bridge_quotes(body.to_request(), fetcher=fetcher)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch bridge quotes: {e}")

    reset_required = is_eth_usdt(body.srcChainId, body.srcTokenAddress)
    return {
        "quotes": [quote.to_dict() for quote in quotes],
        "count": len(quotes),
        "resetApprovalRequired": reset_required,
        "resetApprovalData": get_eth_usdt_reset_data() if reset_required else None,
    }
