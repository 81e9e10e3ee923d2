"""Tests for amount scaling, rounding direction and sign conventions."""

import decimal
from decimal import Decimal

import pytest

from perpetual.models import OrderSide
from perpetual.quantization import quantize


def test_sell_rounds_down_and_negates_synthetic(btc_market) -> None:
    amounts = quantize(btc_market, OrderSide.SELL, Decimal("0.001"), Decimal("43445.1168"), Decimal("0.0005"))
    assert amounts.synthetic == -1000
    assert amounts.collateral == 43445116
    assert amounts.fee == 21723
    assert amounts.collateral_amount == Decimal("43.4451168")


def test_buy_rounds_up_and_negates_collateral(btc_market) -> None:
    amounts = quantize(btc_market, OrderSide.BUY, Decimal("0.001"), Decimal("43445.1168"), Decimal("0.0005"))
    assert amounts.synthetic == 1000
    assert amounts.collateral == -43445117
    assert amounts.fee == 21723


def test_fee_is_never_negative(btc_market) -> None:
    for side in OrderSide:
        amounts = quantize(btc_market, side, Decimal("1.5"), Decimal("100"), Decimal("0.0005"))
        assert amounts.fee >= 0


def test_builder_fee_adds_to_taker_rate(btc_market) -> None:
    amounts = quantize(
        btc_market,
        OrderSide.SELL,
        Decimal("0.001"),
        Decimal("43445.1168"),
        Decimal("0.0005"),
        builder_fee_rate=Decimal("0.0001"),
    )
    # 0.0006 * 43.4451168 * 1e6 = 26067.07008 -> ceil
    assert amounts.fee == 26068


def test_sub_resolution_amounts(btc_market) -> None:
    sell = quantize(btc_market, OrderSide.SELL, Decimal("0.0000001"), Decimal("1"), Decimal("0.0005"))
    assert sell.synthetic == 0
    assert sell.collateral == 0
    assert sell.fee == 1

    buy = quantize(btc_market, OrderSide.BUY, Decimal("0.0000001"), Decimal("1"), Decimal("0.0005"))
    assert buy.synthetic == 1
    assert buy.collateral == -1
    assert buy.fee == 1


def test_zero_fee_rate(btc_market) -> None:
    amounts = quantize(btc_market, OrderSide.BUY, Decimal("2"), Decimal("10"), Decimal("0"))
    assert amounts.fee == 0
    assert amounts.collateral == -20_000_000
    assert amounts.synthetic == 2_000_000


def test_high_precision_product_is_exact(btc_market) -> None:
    amount = Decimal("123456789.123456789123456789")
    price = Decimal("98765.4321987654321")
    amounts = quantize(btc_market, OrderSide.SELL, amount, price, Decimal("0"))
    with decimal.localcontext() as ctx:
        ctx.prec = 100
        exact = amount * price * 1_000_000
    assert amounts.collateral == int(exact.to_integral_value(rounding=decimal.ROUND_FLOOR))
    assert amounts.synthetic == -123456789123456


def test_long_amount_rounds_up_exactly_for_buy(btc_market) -> None:
    # 127 significant digits, beyond any fixed working precision.
    amount = Decimal("1." + "0" * 125 + "1")
    amounts = quantize(btc_market, OrderSide.BUY, amount, Decimal("1"), Decimal("0"))
    assert amounts.synthetic == 1_000_001
    assert amounts.collateral == -1_000_001


def test_long_amount_rounds_down_exactly_for_sell(btc_market) -> None:
    amount = Decimal("0." + "9" * 200)
    amounts = quantize(btc_market, OrderSide.SELL, amount, Decimal("1"), Decimal("0"))
    assert amounts.synthetic == -999_999
    assert amounts.collateral == 999_999


def test_long_fee_rate_still_rounds_up(btc_market) -> None:
    rate = Decimal("0." + "0" * 150 + "1")
    amounts = quantize(btc_market, OrderSide.SELL, Decimal("1"), Decimal("1"), rate)
    assert amounts.fee == 1


def test_non_finite_amount_is_rejected(btc_market) -> None:
    with pytest.raises(ValueError):
        quantize(btc_market, OrderSide.BUY, Decimal("Infinity"), Decimal("1"), Decimal("0"))
