from unittest.mock import AsyncMock

import pytest

from metabridge.config import Settings, settings
from metabridge.core.bridge.constants import CACHE_REFRESH_TEN_MINUTES
from metabridge.core.bridge.feature_flags import (
    Fallback,
    Validated,
    default_feature_flags,
    fetch_bridge_feature_flags,
    resolve_bridge_feature_flags,
)
from metabridge.core.bridge.validators import EXTENSION_CONFIG_VALIDATORS, validate_response
from metabridge.errors import TransportFailure


def _remote_flags(chains=None):
    return {
        "extension-config": {
            "refreshRate": 3000,
            "maxRefreshCount": 3,
            "support": True,
            "chains": chains
            if chains is not None
            else {
                "1": {"isActiveSrc": True, "isActiveDest": True},
                "10": {"isActiveSrc": True, "isActiveDest": False},
            },
        },
        "mobile-config": {"refreshRate": 5000},
    }


@pytest.mark.asyncio
async def test_chain_keys_are_remapped_to_caip(stub_fetcher):
    fetcher = stub_fetcher(_remote_flags())

    resolution = await resolve_bridge_feature_flags(fetcher)

    assert isinstance(resolution, Validated)
    config = resolution.flags.extension_config
    assert set(config.chains) == {"eip155:1", "eip155:10"}
    assert "1" not in config.chains
    assert config.refresh_rate == 3000
    assert config.max_refresh_count == 3
    assert config.support is True


@pytest.mark.asyncio
async def test_request_uses_client_header_and_ten_minute_cache(stub_fetcher):
    fetcher = stub_fetcher(_remote_flags())

    await fetch_bridge_feature_flags(fetcher)

    call = fetcher.calls[0]
    assert call["url"] == f"{settings.bridge_api_url}/getAllFeatureFlags"
    assert call["fetch_options"].method == "GET"
    assert call["fetch_options"].headers == {"X-Client-Id": settings.bridge_client_id}
    assert call["cache_options"].cache_refresh_time == CACHE_REFRESH_TEN_MINUTES == 600_000
    assert call["function_name"] == "fetchBridgeFeatureFlags"


@pytest.mark.asyncio
async def test_active_chain_helpers(stub_fetcher):
    flags = await fetch_bridge_feature_flags(stub_fetcher(_remote_flags()))
    config = flags.extension_config

    assert config.active_src_chains() == ["eip155:1", "eip155:10"]
    assert config.active_dest_chains() == ["eip155:1"]
    assert config.is_chain_supported("eip155:10")
    assert not config.is_chain_supported("eip155:10", as_source=False)
    assert not config.is_chain_supported("eip155:137")


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        "maintenance",
        {},
        {"extension-config": None},
        {"extension-config": {"refreshRate": "fast", "maxRefreshCount": 5, "support": True, "chains": {}}},
        {"extension-config": {"refreshRate": 3000, "maxRefreshCount": 5, "chains": {}}},
        {"extension-config": {"refreshRate": 3000, "maxRefreshCount": 5, "support": True, "chains": {"1": "on"}}},
        {"extension-config": {"refreshRate": 3000, "maxRefreshCount": 5, "support": True, "chains": {}, "surprise": 1}},
        {"extension-config": {"refreshRate": 3000, "maxRefreshCount": 5, "support": True, "chains": {"mainnet": {"isActiveSrc": True, "isActiveDest": True}}}},
    ],
)
@pytest.mark.asyncio
async def test_malformed_payloads_fall_back_to_default(stub_fetcher, payload):
    resolution = await resolve_bridge_feature_flags(stub_fetcher(payload))

    assert isinstance(resolution, Fallback)
    assert resolution.flags == default_feature_flags()


@pytest.mark.parametrize("error", [TransportFailure("boom"), RuntimeError("cache corrupted"), ValueError("bad json")])
@pytest.mark.asyncio
async def test_fetch_errors_fall_back_to_default(stub_fetcher, error):
    flags = await fetch_bridge_feature_flags(stub_fetcher(error=error))

    assert flags.to_dict() == {
        "extensionConfig": {
            "refreshRate": 30_000,
            "maxRefreshCount": 5,
            "support": False,
            "chains": {},
        }
    }


def test_default_passes_the_same_validators():
    payload = default_feature_flags().extension_config.to_payload()
    assert validate_response(EXTENSION_CONFIG_VALIDATORS, payload, "default")
    assert payload["support"] is False
    assert payload["chains"] == {}
    assert payload["maxRefreshCount"] == 5


@pytest.mark.asyncio
async def test_remote_flags_are_fetched_once_per_resolution():
    fetcher = AsyncMock()
    fetcher.fetch.return_value = _remote_flags()

    resolution = await resolve_bridge_feature_flags(fetcher)

    assert resolution.source == "remote"
    fetcher.fetch.assert_awaited_once()
    url, fetch_options, cache_options, function_name = fetcher.fetch.await_args.args
    assert url.endswith("/getAllFeatureFlags")
    assert fetch_options.signal is None


@pytest.mark.asyncio
async def test_unrelated_flags_do_not_disable_bridging(stub_fetcher):
    payload = _remote_flags()
    payload["approval-gas-multiplier"] = {"1": 1.2}
    payload["swaps-enabled"] = True

    resolution = await resolve_bridge_feature_flags(stub_fetcher(payload))

    assert isinstance(resolution, Validated)
    assert resolution.flags.extension_config.support is True
    assert set(resolution.flags.extension_config.chains) == {"eip155:1", "eip155:10"}


@pytest.mark.asyncio
async def test_fallback_ignores_environment_overrides(monkeypatch, stub_fetcher):
    monkeypatch.setenv("BRIDGE_MAX_REFRESH_COUNT", "0")
    monkeypatch.setenv("BRIDGE_REFRESH_INTERVAL_MS", "1")
    monkeypatch.setattr("metabridge.config.settings", Settings())

    flags = await fetch_bridge_feature_flags(stub_fetcher(error=TransportFailure("down")))

    assert flags.extension_config.max_refresh_count == 5
    assert flags.extension_config.refresh_rate == 30_000
