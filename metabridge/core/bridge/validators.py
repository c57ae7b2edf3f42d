"""Declarative validation of untrusted bridge API payloads.

A :class:`ValidatorSet` maps field names to :class:`Validator` entries. Each
entry carries a pure predicate over that field's value. A payload is accepted
only when every required field is present and every predicate for a present
field passes. New response shapes are supported by declaring a new set, not by
writing a new checker.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional

import structlog

from ...errors import ValidationFailure
from .caip import is_evm_address, is_valid_solana_address
from .constants import BridgeFlag

logger = structlog.stdlib.get_logger("bridge.validation")

Predicate = Callable[[Any], bool]

_HEX_STRING_RE = re.compile(r"^0x[0-9a-fA-F]*$")
_NUMERIC_STRING_RE = re.compile(r"^[0-9]+(\.[0-9]+)?$")
_MAX_LOGGED_VALUE = 200


# ─────────────────────────────────────────────────────────────────────────────
# Predicates
# ─────────────────────────────────────────────────────────────────────────────

def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_mapping(value: Any) -> bool:
    return isinstance(value, MappingABC)


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_hex_string(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_STRING_RE.fullmatch(value))


def is_numeric_string(value: Any) -> bool:
    return isinstance(value, str) and bool(_NUMERIC_STRING_RE.fullmatch(value))


def is_address(value: Any) -> bool:
    return isinstance(value, str) and (is_evm_address(value) or is_valid_solana_address(value))


def max_length(limit: int) -> Predicate:
    def _check(value: Any) -> bool:
        return isinstance(value, str) and len(value) <= limit

    return _check


def one_of(*allowed: Any) -> Predicate:
    def _check(value: Any) -> bool:
        return any(value == option and type(value) is type(option) for option in allowed)

    return _check


def in_range(minimum: Optional[float] = None, maximum: Optional[float] = None) -> Predicate:
    def _check(value: Any) -> bool:
        if not is_number(value):
            return False
        if minimum is not None and value < minimum:
            return False
        if maximum is not None and value > maximum:
            return False
        return True

    return _check


def all_of(*predicates: Predicate) -> Predicate:
    def _check(value: Any) -> bool:
        return all(predicate(value) for predicate in predicates)

    return _check


def any_of(*predicates: Predicate) -> Predicate:
    def _check(value: Any) -> bool:
        return any(predicate(value) for predicate in predicates)

    return _check


def optional(predicate: Predicate) -> Predicate:
    """Accept ``None`` in addition to whatever ``predicate`` accepts."""

    def _check(value: Any) -> bool:
        return value is None or predicate(value)

    return _check


def mapping_of(value_predicate: Predicate, key_predicate: Predicate = is_string) -> Predicate:
    def _check(value: Any) -> bool:
        if not is_mapping(value):
            return False
        return all(key_predicate(key) and value_predicate(item) for key, item in value.items())

    return _check


def sequence_of(predicate: Predicate) -> Predicate:
    def _check(value: Any) -> bool:
        return is_sequence(value) and all(predicate(item) for item in value)

    return _check


def nested(validator_set: "ValidatorSet", *, strict: bool = False) -> Predicate:
    """Recursive check of a sub-object against another validator set. Never logs."""

    def _check(value: Any) -> bool:
        return validator_set.find_failure(value, source="", strict=strict) is None

    return _check


# ─────────────────────────────────────────────────────────────────────────────
# Validator sets
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Validator:
    """One field of a validator set."""

    property: str
    type: str
    predicate: Predicate
    required: bool = True


class ValidatorSet(MappingABC):
    """Named, ordered mapping of field name -> :class:`Validator`.

    ``allow_extra`` marks open-ended envelopes whose undeclared keys are
    accepted even by a strict check.
    """

    def __init__(self, name: str, validators: Iterable[Validator], *, allow_extra: bool = False) -> None:
        self.name = name
        self.allow_extra = allow_extra
        self._validators: Dict[str, Validator] = {}
        for validator in validators:
            if validator.property in self._validators:
                raise ValueError(f"{name}: duplicate validator for {validator.property!r}")
            self._validators[validator.property] = validator

    def __getitem__(self, key: str) -> Validator:
        return self._validators[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._validators)

    def __len__(self) -> int:
        return len(self._validators)

    def __repr__(self) -> str:
        return f"ValidatorSet({self.name!r}, fields={list(self._validators)})"

    def find_failure(self, data: Any, *, source: str, strict: bool = True) -> Optional[ValidationFailure]:
        """Return the first failure for ``data`` or ``None`` when it is acceptable."""

        if not is_mapping(data):
            return ValidationFailure(source, None, data, expected="object", reason="not an object")

        if strict and not self.allow_extra:
            for key in data:
                if key not in self._validators:
                    return ValidationFailure(source, str(key), data[key], reason="unexpected property")

        for validator in self._validators.values():
            if validator.property not in data:
                if validator.required:
                    return ValidationFailure(
                        source, validator.property, None, expected=validator.type, reason="missing"
                    )
                continue
            value = data[validator.property]
            if not validator.predicate(value):
                return ValidationFailure(source, validator.property, value, expected=validator.type)
        return None


def _preview(value: Any) -> str:
    text = repr(value)
    if len(text) > _MAX_LOGGED_VALUE:
        return text[:_MAX_LOGGED_VALUE] + "..."
    return text


def assert_valid(
    validator_set: ValidatorSet,
    data: Any,
    source: str,
    strict: bool = True,
) -> Mapping[str, Any]:
    """Raise :class:`ValidationFailure` unless ``data`` satisfies ``validator_set``."""

    failure = validator_set.find_failure(data, source=source, strict=strict)
    if failure is not None:
        raise failure
    return data


def validate_response(
    validator_set: ValidatorSet,
    data: Any,
    source: str,
    strict: bool = True,
) -> bool:
    """Return True iff ``data`` satisfies ``validator_set``; log the failing field otherwise.

    Strict checks reject properties the set does not declare and log at
    warning level. Non-strict checks tolerate extra properties (for payloads
    whose shape evolves outside our control) and only log at debug level.
    """

    try:
        assert_valid(validator_set, data, source, strict)
    except ValidationFailure as exc:
        log = logger.warning if strict else logger.debug
        log(
            "invalid_bridge_response",
            source=source,
            validator_set=validator_set.name,
            property=exc.field,
            reason=exc.reason,
            expected=exc.expected,
            value=_preview(exc.value),
            value_type=type(exc.value).__name__,
        )
        return False
    return True


# ─────────────────────────────────────────────────────────────────────────────
# Bridge API shapes
# ─────────────────────────────────────────────────────────────────────────────

_non_negative_int = all_of(is_integer, in_range(minimum=0))

CHAIN_CONFIG_VALIDATORS = ValidatorSet(
    "chain_config",
    [
        Validator("isActiveSrc", "boolean", is_boolean),
        Validator("isActiveDest", "boolean", is_boolean),
    ],
)

EXTENSION_CONFIG_VALIDATORS = ValidatorSet(
    "extension_config",
    [
        Validator("refreshRate", "integer>=0", _non_negative_int),
        Validator("maxRefreshCount", "integer>=0", _non_negative_int),
        Validator("support", "boolean", is_boolean),
        Validator("chains", "object<chain_config>", mapping_of(nested(CHAIN_CONFIG_VALIDATORS))),
    ],
)

FEATURE_FLAG_VALIDATORS = ValidatorSet(
    "feature_flags",
    [
        Validator(
            BridgeFlag.EXTENSION_CONFIG.value,
            "object<extension_config>",
            nested(EXTENSION_CONFIG_VALIDATORS, strict=True),
        ),
        Validator(BridgeFlag.MOBILE_CONFIG.value, "object", is_mapping, required=False),
    ],
    # getAllFeatureFlags carries every flag, not just the bridge ones
    allow_extra=True,
)

TOKEN_VALIDATORS = ValidatorSet(
    "token",
    [
        Validator("decimals", "integer", all_of(is_integer, in_range(0, 255))),
        Validator("address", "address", all_of(max_length(44), is_address)),
        Validator("symbol", "string<=12", all_of(is_non_empty_string, max_length(12))),
        Validator("name", "string", is_string, required=False),
        Validator("chainId", "integer", _non_negative_int, required=False),
        Validator("iconUrl", "string|null", optional(is_string), required=False),
        Validator("icon", "string|null", optional(is_string), required=False),
        Validator("aggregators", "string[]", sequence_of(is_string), required=False),
    ],
)

QUOTE_RESPONSE_VALIDATORS = ValidatorSet(
    "quote_response",
    [
        Validator("quote", "object", is_mapping),
        Validator("estimatedProcessingTimeInSeconds", "number>=0", in_range(minimum=0)),
        Validator("approval", "object|null", optional(is_mapping), required=False),
        Validator("trade", "object", is_mapping),
    ],
)

QUOTE_VALIDATORS = ValidatorSet(
    "quote",
    [
        Validator("requestId", "string", is_non_empty_string),
        Validator("srcChainId", "integer", _non_negative_int),
        Validator("srcAsset", "object", is_mapping),
        Validator("srcTokenAmount", "numeric string", is_numeric_string),
        Validator("destChainId", "integer", _non_negative_int),
        Validator("destAsset", "object", is_mapping),
        Validator("destTokenAmount", "numeric string", is_numeric_string),
        Validator("feeData", "object", is_mapping),
        Validator("bridgeId", "string", is_string),
        Validator("bridges", "string[]", sequence_of(is_string)),
        Validator("steps", "object[]", sequence_of(is_mapping), required=False),
        Validator("refuel", "object", is_mapping, required=False),
    ],
)

FEE_DATA_VALIDATORS = ValidatorSet(
    "fee_data",
    [
        Validator("amount", "numeric string", is_numeric_string),
        Validator("asset", "object<token>", nested(TOKEN_VALIDATORS)),
    ],
)

TX_DATA_VALIDATORS = ValidatorSet(
    "tx_data",
    [
        Validator("chainId", "integer", _non_negative_int),
        Validator("to", "address", is_address),
        Validator("from", "address", is_address),
        Validator("value", "hex string", is_hex_string),
        Validator("data", "hex string", is_hex_string),
        Validator("gasLimit", "integer|null", optional(_non_negative_int)),
    ],
)


__all__ = [
    "CHAIN_CONFIG_VALIDATORS",
    "EXTENSION_CONFIG_VALIDATORS",
    "FEATURE_FLAG_VALIDATORS",
    "FEE_DATA_VALIDATORS",
    "QUOTE_RESPONSE_VALIDATORS",
    "QUOTE_VALIDATORS",
    "TOKEN_VALIDATORS",
    "TX_DATA_VALIDATORS",
    "Predicate",
    "Validator",
    "ValidatorSet",
    "all_of",
    "any_of",
    "assert_valid",
    "in_range",
    "is_address",
    "is_boolean",
    "is_hex_string",
    "is_integer",
    "is_mapping",
    "is_non_empty_string",
    "is_number",
    "is_numeric_string",
    "is_sequence",
    "is_string",
    "mapping_of",
    "max_length",
    "nested",
    "one_of",
    "optional",
    "sequence_of",
    "validate_response",
]
