"""
Per-account fee cache and fee resolution.

Fees are set by the venue per sub-account and market and fetched from the
``/user/fees`` endpoint; this module only caches them.  The cache is shared
by every order-build call made on behalf of an account, so it is guarded by
a reader/writer lock: readers proceed concurrently, while a writer waits for
in-flight readers to drain and then holds the cache exclusively.  Markets
without a cached entry resolve to :data:`perpetual.models.DEFAULT_FEES`.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping

from .models import DEFAULT_FEES, TradingFee

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Writer-preferring reader/writer lock built on a condition variable."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class FeeCache:
    """Mapping of market name to :class:`TradingFee`, safe for concurrent use."""

    def __init__(self) -> None:
        self._fees: Dict[str, TradingFee] = {}
        self._lock = ReadWriteLock()

    def get(self, market_name: str) -> TradingFee:
        """Return the cached fee for ``market_name`` or the default schedule."""
        with self._lock.read():
            return self._fees.get(market_name, DEFAULT_FEES)

    def set(self, market_name: str, fee: TradingFee) -> None:
        with self._lock.write():
            self._fees[market_name] = fee
        logger.debug("Cached fees for %s: taker=%s maker=%s", market_name, fee.taker_fee_rate, fee.maker_fee_rate)

    def set_many(self, fees: Mapping[str, TradingFee]) -> None:
        """Replace entries for several markets in one exclusive update."""
        with self._lock.write():
            self._fees.update(fees)
        logger.debug("Cached fees for %d markets", len(fees))

    def snapshot(self) -> Dict[str, TradingFee]:
        with self._lock.read():
            return dict(self._fees)

    def __contains__(self, market_name: object) -> bool:
        with self._lock.read():
            return market_name in self._fees


def resolve_fees(account, market_name: str) -> TradingFee:
    """Resolve the fee schedule that applies to an order on ``market_name``.

    ``account`` is anything exposing a :class:`FeeCache` as ``fees``, normally
    a :class:`perpetual.account.TradingAccount`.
    """
    return account.fees.get(market_name)
