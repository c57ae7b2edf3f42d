"""
Tests for the declarative bridge payload validators.
"""

import pytest
from structlog.testing import capture_logs

from metabridge.core.bridge.validators import (
    FEATURE_FLAG_VALIDATORS,
    QUOTE_RESPONSE_VALIDATORS,
    TOKEN_VALIDATORS,
    TX_DATA_VALIDATORS,
    Validator,
    ValidatorSet,
    all_of,
    assert_valid,
    in_range,
    is_boolean,
    is_hex_string,
    is_integer,
    is_number,
    is_string,
    mapping_of,
    nested,
    one_of,
    optional,
    sequence_of,
    validate_response,
)
from metabridge.errors import ValidationFailure


SOURCE = "https://bridge.api.cx.metamask.io/getQuote"


# =============================================================================
# Predicates
# =============================================================================

class TestPredicates:
    def test_numbers_exclude_booleans_and_nan(self):
        assert is_number(1) and is_number(1.5)
        assert not is_number(True)
        assert not is_number(float("nan"))
        assert not is_number("1")
        assert is_number(10**80)

    def test_integer(self):
        assert is_integer(0)
        assert not is_integer(1.0)
        assert not is_integer(False)

    def test_hex_string(self):
        assert is_hex_string("0x")
        assert is_hex_string("0x095ea7b3")
        assert not is_hex_string("095ea7b3")
        assert not is_hex_string("0xzz")

    def test_one_of_is_type_sensitive(self):
        check = one_of("metabridge", "refuel")
        assert check("refuel")
        assert not check("other")
        assert one_of(1)(1)
        assert not one_of(1)(True)

    def test_in_range(self):
        check = in_range(0, 100)
        assert check(0) and check(100)
        assert not check(-1)
        assert not check(101)
        assert not check("50")

    def test_combinators(self):
        assert optional(is_string)(None)
        assert not optional(is_string)(1)
        assert mapping_of(is_boolean)({"a": True})
        assert not mapping_of(is_boolean)({"a": 1})
        assert not mapping_of(is_boolean)([True])
        assert sequence_of(is_string)(["a", "b"])
        assert not sequence_of(is_string)("ab")
        assert all_of(is_integer, in_range(minimum=0))(3)
        assert not all_of(is_integer, in_range(minimum=0))(-3)

    def test_nested_checks_sub_object(self):
        inner = ValidatorSet("inner", [Validator("flag", "boolean", is_boolean)])
        check = nested(inner)
        assert check({"flag": True, "extra": 1})
        assert not check({"flag": "yes"})
        assert not check("not a mapping")
        assert not nested(inner, strict=True)({"flag": True, "extra": 1})


# =============================================================================
# Validator sets
# =============================================================================

class TestValidatorSet:
    @pytest.fixture
    def pair_set(self):
        return ValidatorSet(
            "pair",
            [
                Validator("name", "string", is_string),
                Validator("count", "integer", is_integer, required=False),
            ],
        )

    def test_is_a_mapping_of_field_names(self, pair_set):
        assert list(pair_set) == ["name", "count"]
        assert pair_set["name"].type == "string"
        assert len(pair_set) == 2

    def test_duplicate_fields_are_rejected(self):
        with pytest.raises(ValueError):
            ValidatorSet("dup", [Validator("a", "string", is_string), Validator("a", "string", is_string)])

    def test_optional_field_may_be_absent(self, pair_set):
        assert validate_response(pair_set, {"name": "x"}, SOURCE)

    def test_present_optional_field_is_still_checked(self, pair_set):
        assert not validate_response(pair_set, {"name": "x", "count": "3"}, SOURCE)

    def test_missing_required_field(self, pair_set):
        with pytest.raises(ValidationFailure) as exc_info:
            assert_valid(pair_set, {"count": 1}, SOURCE)
        assert exc_info.value.field == "name"
        assert exc_info.value.reason == "missing"

    def test_strict_rejects_unknown_fields(self, pair_set):
        data = {"name": "x", "surprise": True}
        assert not validate_response(pair_set, data, SOURCE)
        assert validate_response(pair_set, data, SOURCE, strict=False)

    @pytest.mark.parametrize("value", [None, [], "quote", 42])
    def test_non_mappings_fail(self, pair_set, value):
        assert not validate_response(pair_set, value, SOURCE)

    def test_strict_failure_logs_source_and_field(self):
        tx = {"chainId": 1, "from": "0x141d32a89a1e0a5Ef360034a2f60a4B917c18838", "value": "0x0", "data": "0x", "gasLimit": 1}
        with capture_logs() as logs:
            assert validate_response(TX_DATA_VALIDATORS, tx, SOURCE) is False

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "invalid_bridge_response"
        assert entry["log_level"] == "warning"
        assert entry["source"] == SOURCE
        assert entry["property"] == "to"
        assert entry["reason"] == "missing"

    def test_non_strict_failure_logs_at_debug(self):
        with capture_logs() as logs:
            assert validate_response(TOKEN_VALIDATORS, {"symbol": "USDC"}, SOURCE, strict=False) is False
        assert logs[0]["log_level"] == "debug"

    def test_success_logs_nothing(self):
        with capture_logs() as logs:
            assert validate_response(QUOTE_RESPONSE_VALIDATORS, {"quote": {}, "trade": {}, "estimatedProcessingTimeInSeconds": 0}, SOURCE)
        assert logs == []


class TestBridgeShapes:
    def test_token_symbol_length_limit(self):
        token = {"address": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "symbol": "USDC", "decimals": 6}
        assert validate_response(TOKEN_VALIDATORS, token, SOURCE)
        assert not validate_response(TOKEN_VALIDATORS, {**token, "symbol": "VISIT-CLAIM-NOW"}, SOURCE)
        assert not validate_response(TOKEN_VALIDATORS, {**token, "decimals": "6"}, SOURCE)

    def test_approval_may_be_null(self):
        envelope = {"quote": {}, "trade": {}, "approval": None, "estimatedProcessingTimeInSeconds": 30}
        assert validate_response(QUOTE_RESPONSE_VALIDATORS, envelope, SOURCE)
        assert not validate_response(QUOTE_RESPONSE_VALIDATORS, {**envelope, "approval": "0x"}, SOURCE)

    def test_gas_limit_may_be_null(self):
        tx = {
            "chainId": 1,
            "to": "0x0439e60F02a8900a951603950d8D4527f400C3f1",
            "from": "0x141d32a89a1e0a5Ef360034a2f60a4B917c18838",
            "value": "0x0",
            "data": "0x",
            "gasLimit": None,
        }
        assert validate_response(TX_DATA_VALIDATORS, tx, SOURCE)

    def test_feature_flag_chain_configs_are_checked(self):
        flags = {
            "extension-config": {
                "refreshRate": 30000,
                "maxRefreshCount": 5,
                "support": True,
                "chains": {"1": {"isActiveSrc": True, "isActiveDest": "yes"}},
            }
        }
        assert not validate_response(FEATURE_FLAG_VALIDATORS, flags, SOURCE)
        flags["extension-config"]["chains"]["1"]["isActiveDest"] = False
        assert validate_response(FEATURE_FLAG_VALIDATORS, flags, SOURCE)

    def test_negative_refresh_rate_is_rejected(self):
        flags = {"extension-config": {"refreshRate": -1, "maxRefreshCount": 5, "support": True, "chains": {}}}
        assert not validate_response(FEATURE_FLAG_VALIDATORS, flags, SOURCE)

    def test_feature_flag_envelope_is_open_but_extension_config_is_closed(self):
        config = {"refreshRate": 30000, "maxRefreshCount": 5, "support": True, "chains": {}}
        other_flags = {"extension-config": config, "approval-gas-multiplier": {"1": 1.2}}
        assert validate_response(FEATURE_FLAG_VALIDATORS, other_flags, SOURCE)
        assert not validate_response(FEATURE_FLAG_VALIDATORS, {"extension-config": {**config, "surprise": 1}}, SOURCE)

    def test_allow_extra_applies_per_set(self):
        open_set = ValidatorSet("open", [Validator("name", "string", is_string)], allow_extra=True)
        assert validate_response(open_set, {"name": "x", "other": 1}, SOURCE)
        assert not validate_response(open_set, {"other": 1}, SOURCE)
