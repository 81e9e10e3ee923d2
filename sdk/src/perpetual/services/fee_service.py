from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from ..account import TradingAccount
from ..models import TradingFee

logger = logging.getLogger(__name__)


class FeeService:
    """Refresh an account's fee cache from the venue's fee schedule."""

    def __init__(self, client) -> None:
        self.client = client

    async def refresh(
        self,
        account: TradingAccount,
        market_names: Iterable[str],
        builder_id: Optional[int] = None,
    ) -> Dict[str, TradingFee]:
        names = list(market_names)
        fees = await self.client.get_fees(names, builder_id=builder_id)
        by_market = {fee.market: fee for fee in fees if fee.market}
        account.fees.set_many(by_market)
        missing = sorted(set(names) - set(by_market))
        if missing:
            logger.warning("No fee schedule returned for %s; default fees remain in effect", ", ".join(missing))
        logger.info("Refreshed fees for %d markets", len(by_market))
        return by_market
