import copy
from typing import Any, Dict, List, Optional

import pytest

WALLET = "0x141d32a89a1e0a5Ef360034a2f60a4B917c18838"
NATIVE = "0x0000000000000000000000000000000000000000"
METABRIDGE = "0x0439e60F02a8900a951603950d8D4527f400C3f1"


class StubFetcher:
    """Records calls and returns a canned payload (or raises a canned error)."""

    def __init__(self, response: Any = None, error: Optional[BaseException] = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def fetch(self, url, fetch_options, cache_options, function_name):
        self.calls.append(
            {
                "url": url,
                "fetch_options": fetch_options,
                "cache_options": cache_options,
                "function_name": function_name,
            }
        )
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.response)


def _asset(chain_id: int = 1, address: str = NATIVE, symbol: str = "ETH", decimals: int = 18) -> Dict[str, Any]:
    return {
        "chainId": chain_id,
        "address": address,
        "symbol": symbol,
        "name": "Ether" if symbol == "ETH" else symbol,
        "decimals": decimals,
        "icon": "https://media.socket.tech/tokens/all/ETH",
        "coinKey": symbol,
        "priceUSD": "2478.7",
    }


def _tx(chain_id: int = 1, data: str = "0x3ce33bff0000") -> Dict[str, Any]:
    return {
        "chainId": chain_id,
        "to": METABRIDGE,
        "from": WALLET,
        "value": "0x038d7ea4c68000",
        "data": data,
        "gasLimit": 409394,
    }


def build_quote_response(request_id: str = "req-1", *, with_approval: bool = False) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "quote": {
            "requestId": request_id,
            "srcChainId": 1,
            "srcAsset": _asset(),
            "srcTokenAmount": "991250000000000",
            "destChainId": 10,
            "destAsset": _asset(chain_id=10),
            "destTokenAmount": "990654755978162",
            "feeData": {
                "metabridge": {"amount": "8750000000000", "asset": _asset()},
            },
            "bridgeId": "lifi",
            "bridges": ["across"],
            "steps": [
                {
                    "action": "bridge",
                    "srcChainId": 1,
                    "destChainId": 10,
                    "protocol": {"name": "across", "displayName": "Across"},
                }
            ],
        },
        "trade": _tx(),
        "estimatedProcessingTimeInSeconds": 15,
    }
    if with_approval:
        payload["approval"] = _tx(data="0x095ea7b3")
    return payload


@pytest.fixture
def stub_fetcher():
    return StubFetcher


@pytest.fixture
def quote_response():
    return build_quote_response
