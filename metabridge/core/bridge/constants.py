"""Constants and metadata for the bridge API integration."""

from enum import Enum
from typing import Any, Dict

MINUTE_MS = 60 * 1000

# Feature flags and token lists are refreshed by the fetch layer at most this often.
CACHE_REFRESH_TEN_MINUTES = 10 * MINUTE_MS

# Served when the remote feature flags are unusable.
FALLBACK_REFRESH_RATE_MS = 30 * 1000
FALLBACK_MAX_REFRESH_COUNT = 5

NATIVE_PLACEHOLDER = '0x0000000000000000000000000000000000000000'

ETH_USDT_ADDRESS = '0xdAC17F958D2ee523a2206206994597C13D831ec7'
METABRIDGE_ETHEREUM_ADDRESS = '0x0439e60F02a8900a951603950d8D4527f400C3f1'

EIP155_NAMESPACE = 'eip155'
SOLANA_NAMESPACE = 'solana'

# Solana has no EVM chain id; the bridge API uses this integer in its place.
SOLANA_CHAIN_ID = 1151111081099710
SOLANA_MAINNET_CAIP = 'solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp'


class ChainIds:
    MAINNET = 1
    OPTIMISM = 10
    BSC = 56
    POLYGON = 137
    ZKSYNC_ERA = 324
    BASE = 8453
    ARBITRUM = 42161
    AVALANCHE = 43114
    LINEA_MAINNET = 59144
    SOLANA = SOLANA_CHAIN_ID


class BridgeFlag(str, Enum):
    EXTENSION_CONFIG = 'extension-config'
    MOBILE_CONFIG = 'mobile-config'


class BridgeFeatureFlagsKey(str, Enum):
    EXTENSION_CONFIG = 'extensionConfig'


class FeeType(str, Enum):
    METABRIDGE = 'metabridge'
    REFUEL = 'refuel'


# Native token the wallet already knows about on every supported chain.
# Remote token lists must not offer these a second time.
DEFAULT_TOKEN_METADATA: Dict[int, Dict[str, Any]] = {
    ChainIds.MAINNET: {
        'symbol': 'ETH',
        'name': 'Ether',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/eth_logo.svg',
    },
    ChainIds.OPTIMISM: {
        'symbol': 'ETH',
        'name': 'Ether',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/optimism.svg',
    },
    ChainIds.BSC: {
        'symbol': 'BNB',
        'name': 'Binance Coin',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/bnb.svg',
    },
    ChainIds.POLYGON: {
        'symbol': 'POL',
        'name': 'Polygon',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/pol-token.svg',
    },
    ChainIds.ZKSYNC_ERA: {
        'symbol': 'ETH',
        'name': 'Ether',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/zksync.svg',
    },
    ChainIds.BASE: {
        'symbol': 'ETH',
        'name': 'Ether',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/base.svg',
    },
    ChainIds.ARBITRUM: {
        'symbol': 'ETH',
        'name': 'Ether',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/arbitrum.svg',
    },
    ChainIds.AVALANCHE: {
        'symbol': 'AVAX',
        'name': 'Avalanche',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/avax-token.svg',
    },
    ChainIds.LINEA_MAINNET: {
        'symbol': 'ETH',
        'name': 'Ether',
        'address': NATIVE_PLACEHOLDER,
        'decimals': 18,
        'iconUrl': './images/linea-logo-mainnet.svg',
    },
    ChainIds.SOLANA: {
        'symbol': 'SOL',
        'name': 'Solana',
        'address': 'So11111111111111111111111111111111111111112',
        'decimals': 9,
        'iconUrl': './images/solana-logo.svg',
    },
}
