"""
HTTP exchange client for the perpetuals REST API.

This module defines a lightweight asynchronous client for the handful of
endpoints the order pipeline needs: market listings, fee schedules, order
submission and cancellation.  Requests are authenticated with the account's
API key in the ``X-Api-Key`` header; order authenticity itself comes from
the Stark signature embedded in the payload, not from the transport.

Read-only ``GET`` requests are retried with exponential backoff.  Order
submission and cancellation are sent once: a failed submission surfaces to
the caller, who decides whether to rebuild the order with a fresh nonce.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlencode

import aiohttp
from aiohttp import ClientResponse
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import ExchangeApiError
from ..models import (
    FeeResponse,
    Market,
    MarketsResponse,
    OrderResponse,
    SignedOrder,
    TradingFee,
)

logger = logging.getLogger(__name__)

USER_AGENT = "perpetual-orders/0.1"


class ExchangeHttpClient:
    """Asynchronous REST client bound to one API key."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        timeout: float = 10.0,
    ) -> None:
        """Construct the HTTP client.

        Args:
            api_key: API key of the sub-account placing orders.
            base_url: REST base URL including the ``/api/v1`` prefix.
            timeout: Total per-request timeout in seconds.
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    def build_url(self, path: str, query: Optional[Iterable[tuple]] = None) -> str:
        url = f"{self.base_url}{path}"
        params = [(k, v) for k, v in (query or []) if v is not None]
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    async def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        body = json.dumps(payload) if payload is not None else None
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.request(method, url, headers=self._headers(), data=body) as resp:
                await self._handle_response_errors(resp)
                return await resp.json(content_type=None)

    @staticmethod
    async def _handle_response_errors(resp: ClientResponse) -> None:
        if resp.status >= 400:
            # Avoid logging full response bodies; truncate to prevent leakage
            text = await resp.text()
            truncated = text[:200] if text else ""
            logger.error("REST API error %s: %s", resp.status, truncated)
            raise ExchangeApiError(resp.status, truncated)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=8),
        retry=retry_if_exception_type(aiohttp.ClientError),
        reraise=True,
    )
    async def get(self, url: str) -> Any:
        return await self._request("GET", url)

    async def post(self, url: str, payload: Dict[str, Any]) -> Any:
        return await self._request("POST", url, payload)

    async def delete(self, url: str) -> Any:
        return await self._request("DELETE", url)

    @staticmethod
    def _check_status(data: Dict[str, Any]) -> None:
        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            raise ExchangeApiError(status, "API returned error status")

    async def get_markets(self, market_names: Iterable[str] = ()) -> List[Market]:
        url = self.build_url("/info/markets", [("market", name) for name in market_names])
        data = await self.get(url)
        response = MarketsResponse.model_validate(data)
        if response.status != "OK":
            raise ExchangeApiError(response.status, "API returned error status")
        return response.data

    async def get_fees(self, market_names: Iterable[str], builder_id: Optional[int] = None) -> List[TradingFee]:
        query = [("market", name) for name in market_names]
        query.append(("builderId", builder_id))
        data = await self.get(self.build_url("/user/fees", query))
        response = FeeResponse.model_validate(data)
        if response.status != "OK":
            raise ExchangeApiError(response.status, "API returned error status")
        return response.data

    async def place_order(self, order: SignedOrder) -> OrderResponse:
        data = await self.post(self.build_url("/user/order"), order.to_wire())
        return OrderResponse.model_validate(data)

    async def cancel_order(self, order_id: int) -> None:
        data = await self.delete(self.build_url(f"/user/order/{order_id}"))
        self._check_status(data)

    async def cancel_order_by_external_id(self, external_id: str) -> None:
        data = await self.delete(self.build_url("/user/order", [("externalId", external_id)]))
        self._check_status(data)

    async def mass_cancel(
        self,
        order_ids: Iterable[int] = (),
        external_order_ids: Iterable[str] = (),
        markets: Iterable[str] = (),
        cancel_all: bool = False,
    ) -> None:
        payload: Dict[str, Any] = {
            "orderIds": list(order_ids),
            "externalOrderIds": list(external_order_ids),
            "markets": list(markets),
        }
        payload = {key: value for key, value in payload.items() if value}
        if cancel_all:
            payload["cancelAll"] = True
        data = await self.post(self.build_url("/user/order/massCancel"), payload)
        self._check_status(data)
