"""
Exceptions raised while building, signing and submitting orders.

Every order-build failure derives from :class:`OrderBuildError` and carries
the offending ``field`` and ``value`` so callers can log the failure without
re-deriving intermediate state.  All of them are terminal for the call that
raised them; nothing in this package retries an order build.
"""

from __future__ import annotations

from typing import Any, Optional


class OrderBuildError(Exception):
    """Base class for failures of the order object pipeline."""

    reason = "order_build_error"

    def __init__(self, message: str, *, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidSide(OrderBuildError):
    reason = "invalid_side"

    def __init__(self, value: Any) -> None:
        super().__init__(f"unexpected order side value: {value!r}", field="side", value=value)


class UnsupportedTimeInForce(OrderBuildError):
    reason = "unsupported_time_in_force"

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"unexpected time in force value: {value!r} (only GTT and IOC are supported)",
            field="time_in_force",
            value=value,
        )


class MissingExpiry(OrderBuildError):
    reason = "missing_expiry"

    def __init__(self) -> None:
        super().__init__("expire_time must be provided", field="expire_time", value=None)


class MissingNonce(OrderBuildError):
    reason = "missing_nonce"

    def __init__(self) -> None:
        super().__init__("nonce must be provided", field="nonce", value=None)


class HashComputationFailed(OrderBuildError):
    reason = "hash_failed"


class SigningFailed(OrderBuildError):
    reason = "signing_failed"


class ExchangeApiError(RuntimeError):
    """The venue answered with an HTTP error or a non-OK status."""

    def __init__(self, status: Any, message: str = "") -> None:
        super().__init__(f"REST API error {status}: {message}" if message else f"REST API error {status}")
        self.status = status
        self.message = message


class OrderIdMismatch(RuntimeError):
    """The venue acknowledged an order under a different external id."""

    def __init__(self, expected: str, got: str) -> None:
        super().__init__(f"mismatched order ID in response: got {got}, expected {expected}")
        self.expected = expected
        self.got = got
