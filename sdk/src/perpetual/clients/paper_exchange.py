"""
Paper exchange client for dry runs.

This client mirrors the order endpoints of :class:`ExchangeHttpClient`
without touching the network.  Submitted orders are kept in memory and
acknowledged with an ``OK`` response echoing their external id, so the
full build-sign-submit path can run against it.  Market and fee lookups
serve whatever was seeded at construction.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Dict, Iterable, List, Optional

from ..models import Market, OrderResponse, OrderSubmissionData, SignedOrder, TradingFee

logger = logging.getLogger(__name__)


class PaperExchangeClient:
    """Record submitted orders and return synthetic acknowledgements."""

    def __init__(
        self,
        markets: Optional[Iterable[Market]] = None,
        fees: Optional[Iterable[TradingFee]] = None,
        latency: float = 0.0,
    ) -> None:
        self.markets: Dict[str, Market] = {m.name: m for m in markets or []}
        self.fees: Dict[str, TradingFee] = {f.market: f for f in fees or [] if f.market}
        self.orders: Dict[str, SignedOrder] = {}
        self.latency = latency
        self._ids = itertools.count(1)
        self._external_ids: Dict[int, str] = {}

    async def get_markets(self, market_names: Iterable[str] = ()) -> List[Market]:
        names = list(market_names)
        if not names:
            return list(self.markets.values())
        return [self.markets[name] for name in names if name in self.markets]

    async def get_fees(self, market_names: Iterable[str], builder_id: Optional[int] = None) -> List[TradingFee]:
        return [self.fees[name] for name in market_names if name in self.fees]

    async def place_order(self, order: SignedOrder) -> OrderResponse:
        if self.latency:
            await asyncio.sleep(self.latency)
        if order.cancel_id is not None:
            self.orders.pop(order.cancel_id, None)
        self.orders[order.id] = order
        order_id = next(self._ids)
        self._external_ids[order_id] = order.id
        logger.info("[paper] accepted %s %s %s@%s id=%s", order.market, order.side.value, order.qty, order.price, order.id)
        return OrderResponse(status="OK", data=OrderSubmissionData(id=order_id, external_id=order.id))

    async def cancel_order(self, order_id: int) -> None:
        external_id = self._external_ids.pop(order_id, None)
        if external_id is not None:
            self.orders.pop(external_id, None)

    async def cancel_order_by_external_id(self, external_id: str) -> None:
        self.orders.pop(external_id, None)

    async def mass_cancel(
        self,
        order_ids: Iterable[int] = (),
        external_order_ids: Iterable[str] = (),
        markets: Iterable[str] = (),
        cancel_all: bool = False,
    ) -> None:
        if cancel_all:
            self.orders.clear()
            return
        market_set = set(markets)
        external_set = set(external_order_ids)
        external_set.update(self._external_ids.get(i, "") for i in order_ids)
        for external_id in list(self.orders):
            if external_id in external_set or self.orders[external_id].market in market_set:
                del self.orders[external_id]
