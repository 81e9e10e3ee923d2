"""Tests for the REST client's URL building, payloads and retry policy.

Network calls are replaced by monkeypatching the client's transport
methods, so these tests never open a socket.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import aiohttp
import pytest
from tenacity import wait_none

from perpetual.clients import ExchangeHttpClient
from perpetual.errors import ExchangeApiError
from perpetual.models import OrderRequest, OrderSide
from perpetual.order_object import build_signed_order

BASE_URL = "https://api.example.test/api/v1"


def test_build_url_skips_none_and_repeats_keys() -> None:
    client = ExchangeHttpClient("key", BASE_URL + "/")
    url = client.build_url("/user/fees", [("market", "BTC-USD"), ("market", "ETH-USD"), ("builderId", None)])
    assert url == f"{BASE_URL}/user/fees?market=BTC-USD&market=ETH-USD"
    assert client.build_url("/info/markets") == f"{BASE_URL}/info/markets"


def test_headers_carry_api_key() -> None:
    headers = ExchangeHttpClient("secret", BASE_URL)._headers()
    assert headers["X-Api-Key"] == "secret"
    assert headers["Content-Type"] == "application/json"
    assert "X-Api-Key" not in ExchangeHttpClient("", BASE_URL)._headers()


@pytest.mark.asyncio
async def test_place_order_posts_wire_payload(account, btc_market, domain, hasher, signer, monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    order = build_signed_order(
        account,
        btc_market,
        OrderRequest(
            side=OrderSide.SELL,
            synthetic_amount=Decimal("0.001"),
            price=Decimal("43445.1168"),
            expire_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
            nonce=1,
        ),
        domain=domain,
        signer=signer,
        hasher=hasher,
    )
    posted = []

    async def fake_post(url, payload):
        posted.append((url, payload))
        return {"status": "OK", "data": {"id": 123, "externalId": order.id}}

    monkeypatch.setattr(client, "post", fake_post)
    response = await client.place_order(order)

    assert posted == [(f"{BASE_URL}/user/order", order.to_wire())]
    assert response.status == "OK"
    assert response.data.id == 123
    assert response.data.external_id == order.id


@pytest.mark.asyncio
async def test_get_fees_parses_schedule(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    requested = []

    async def fake_get(url):
        requested.append(url)
        return {
            "status": "OK",
            "data": [{"market": "BTC-USD", "makerFeeRate": "0.0002", "takerFeeRate": "0.0005"}],
        }

    monkeypatch.setattr(client, "get", fake_get)
    fees = await client.get_fees(["BTC-USD"], builder_id=9)
    assert requested == [f"{BASE_URL}/user/fees?market=BTC-USD&builderId=9"]
    assert fees[0].taker_fee_rate == Decimal("0.0005")
    assert fees[0].builder_fee_rate == Decimal("0")


@pytest.mark.asyncio
async def test_get_markets_error_status(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)

    async def fake_get(url):
        return {"status": "ERROR", "data": []}

    monkeypatch.setattr(client, "get", fake_get)
    with pytest.raises(ExchangeApiError):
        await client.get_markets(["BTC-USD"])


@pytest.mark.asyncio
async def test_mass_cancel_payload(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    posted = []

    async def fake_post(url, payload):
        posted.append((url, payload))
        return {"status": "OK"}

    monkeypatch.setattr(client, "post", fake_post)
    await client.mass_cancel(markets=["BTC-USD"], cancel_all=True)
    assert posted == [(f"{BASE_URL}/user/order/massCancel", {"markets": ["BTC-USD"], "cancelAll": True})]


@pytest.mark.asyncio
async def test_cancel_by_external_id_checks_status(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    deleted = []

    async def fake_delete(url):
        deleted.append(url)
        return {"status": "ERROR"}

    monkeypatch.setattr(client, "delete", fake_delete)
    with pytest.raises(ExchangeApiError):
        await client.cancel_order_by_external_id("abc")
    assert deleted == [f"{BASE_URL}/user/order?externalId=abc"]


@pytest.mark.asyncio
async def test_get_retries_transient_errors(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    attempts = []

    async def flaky_request(method, url, payload=None):
        attempts.append(method)
        if len(attempts) < 3:
            raise aiohttp.ClientConnectionError("reset")
        return {"status": "OK"}

    monkeypatch.setattr(client, "_request", flaky_request)
    fast_get = ExchangeHttpClient.get.retry_with(wait=wait_none())
    assert await fast_get(client, f"{BASE_URL}/info/markets") == {"status": "OK"}
    assert attempts == ["GET", "GET", "GET"]


@pytest.mark.asyncio
async def test_get_gives_up_after_three_attempts(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    attempts = []

    async def failing_request(method, url, payload=None):
        attempts.append(method)
        raise aiohttp.ClientConnectionError("reset")

    monkeypatch.setattr(client, "_request", failing_request)
    fast_get = ExchangeHttpClient.get.retry_with(wait=wait_none())
    with pytest.raises(aiohttp.ClientConnectionError):
        await fast_get(client, f"{BASE_URL}/info/markets")
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_post_is_not_retried(monkeypatch) -> None:
    client = ExchangeHttpClient("key", BASE_URL)
    attempts = []

    async def failing_request(method, url, payload=None):
        attempts.append(method)
        raise aiohttp.ClientConnectionError("reset")

    monkeypatch.setattr(client, "_request", failing_request)
    with pytest.raises(aiohttp.ClientConnectionError):
        await client.post(f"{BASE_URL}/user/order", {})
    assert attempts == ["POST"]
