"""
Expiration encodings for signed orders.

An order carries two representations of its expiry:

* the payload sends the caller's instant as epoch milliseconds, unchanged;
* the hash commits to that instant plus a fourteen day settlement buffer,
  rounded up to the next whole second and expressed in epoch seconds.

Naive datetimes are interpreted as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .errors import MissingExpiry

SETTLEMENT_BUFFER = timedelta(days=14)
DEFAULT_ORDER_TTL = timedelta(hours=1)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)
_ONE_MILLISECOND = timedelta(milliseconds=1)


@dataclass(frozen=True)
class NormalizedExpiry:
    expiration_seconds: int  # buffered, rounded up; used only for hashing
    expiry_epoch_millis: int  # caller instant; used in the payload


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def epoch_millis(value: datetime) -> int:
    return (_as_utc(value) - _EPOCH) // _ONE_MILLISECOND


def hash_expiration_seconds(value: datetime) -> int:
    """Epoch seconds of ``value`` plus the settlement buffer, rounded up."""
    delta = _as_utc(value) + SETTLEMENT_BUFFER - _EPOCH
    seconds, remainder = divmod(delta, _ONE_SECOND)
    if remainder:
        seconds += 1
    return seconds


def normalize(expire_time: Optional[datetime]) -> NormalizedExpiry:
    if expire_time is None:
        raise MissingExpiry()
    return NormalizedExpiry(
        expiration_seconds=hash_expiration_seconds(expire_time),
        expiry_epoch_millis=epoch_millis(expire_time),
    )


def default_expire_time(now: Optional[datetime] = None) -> datetime:
    """Expiry applied upstream when the caller does not supply one."""
    return (now or datetime.now(timezone.utc)) + DEFAULT_ORDER_TTL
