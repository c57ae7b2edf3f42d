"""Error types raised by the bridge core."""

from __future__ import annotations

from typing import Any, Optional


class BridgeError(Exception):
    """Base class for every error raised by the bridge core."""


class InvalidIdentifier(BridgeError, ValueError):
    """A chain id or address could not be parsed."""

    def __init__(self, value: Any, kind: str = "identifier") -> None:
        super().__init__(f"Invalid {kind}: {value!r}")
        self.value = value
        self.kind = kind


class ValidationFailure(BridgeError):
    """An untrusted payload did not match its validator set."""

    def __init__(
        self,
        source: str,
        field: Optional[str],
        value: Any,
        *,
        expected: Optional[str] = None,
        reason: str = "invalid",
    ) -> None:
        location = f"property {field}" if field else "payload"
        message = f"response to GET {source} {reason} for {location}"
        if expected:
            message += f" (expected {expected})"
        super().__init__(message)
        self.source = source
        self.field = field
        self.value = value
        self.expected = expected
        self.reason = reason


class Cancelled(BridgeError):
    """The caller aborted an in-flight request."""


class TransportFailure(BridgeError):
    """The fetch collaborator failed to deliver a response."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


__all__ = [
    "BridgeError",
    "Cancelled",
    "InvalidIdentifier",
    "TransportFailure",
    "ValidationFailure",
]
