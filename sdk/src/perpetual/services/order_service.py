from __future__ import annotations

import dataclasses
import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

from .. import telemetry
from ..account import TradingAccount
from ..errors import ExchangeApiError, OrderIdMismatch
from ..expiry import default_expire_time
from ..hashing import OrderHashFn
from ..models import Market, OrderRequest, OrderSubmissionData, SignedOrder, StarknetDomain
from ..order_object import build_signed_order
from ..signing import OrderSigner

logger = logging.getLogger(__name__)

_NONCE_BOUND = 2**31


def generate_nonce() -> int:
    return secrets.randbelow(_NONCE_BOUND)


class OrderService:
    """Build, sign and submit orders for one account.

    Unlike :func:`build_signed_order`, the service fills in a missing expiry
    (one hour from now) and a missing nonce before building.
    """

    def __init__(
        self,
        account: TradingAccount,
        client,
        domain: StarknetDomain,
        *,
        signer: Optional[OrderSigner] = None,
        hasher: Optional[OrderHashFn] = None,
        nonce_factory: Callable[[], int] = generate_nonce,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.account = account
        self.client = client
        self.domain = domain
        self.signer = signer
        self.hasher = hasher
        self.nonce_factory = nonce_factory
        self.clock = clock

    def with_defaults(self, request: OrderRequest) -> OrderRequest:
        changes = {}
        if request.expire_time is None:
            changes["expire_time"] = default_expire_time(self.clock())
        if request.nonce is None:
            changes["nonce"] = self.nonce_factory()
        return dataclasses.replace(request, **changes) if changes else request

    def build(self, market: Market, request: OrderRequest) -> SignedOrder:
        return build_signed_order(
            self.account,
            market,
            self.with_defaults(request),
            domain=self.domain,
            signer=self.signer,
            hasher=self.hasher,
        )

    async def submit(self, order: SignedOrder) -> OrderSubmissionData:
        try:
            response = await self.client.place_order(order)
        except Exception as exc:
            telemetry.ORDERS_SUBMITTED.labels(market=order.market, status="error").inc()
            logger.error("Error submitting order %s: %s", order.id, exc)
            raise
        telemetry.ORDERS_SUBMITTED.labels(market=order.market, status=response.status).inc()
        if response.status != "OK" or response.data is None:
            logger.error("Order %s rejected with status %s", order.id, response.status)
            raise ExchangeApiError(response.status, "API returned error status")
        if response.data.external_id != order.id:
            raise OrderIdMismatch(expected=order.id, got=response.data.external_id)
        logger.info("Submitted order %s: venue id=%s", order.id, response.data.id)
        return response.data

    async def place_order(self, market: Market, request: OrderRequest) -> OrderSubmissionData:
        """Build, sign and submit ``request``; return the venue's acknowledgement."""
        order = self.build(market, request)
        return await self.submit(order)

    async def cancel_order(self, order_id: int) -> None:
        await self.client.cancel_order(order_id)

    async def cancel_order_by_external_id(self, external_id: str) -> None:
        await self.client.cancel_order_by_external_id(external_id)
