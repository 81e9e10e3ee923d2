"""
Conversion of human-scale order amounts into venue-scale signed integers.

The settlement layer works in fixed-point integers: every synthetic amount
is multiplied by the market's synthetic resolution and every collateral or
fee amount by its collateral resolution.  Rounding always favours the venue:

* BUY rounds collateral and synthetic up, SELL rounds them down;
* the fee is always rounded up.

The amount leaving the account is then negated: collateral for a BUY,
synthetic for a SELL.  Arithmetic runs in a decimal context sized from the
operands, with ``Inexact`` trapped, so no product is rounded before the
final step.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Optional

from .models import Market, OrderSide

_MIN_PRECISION = 28


@dataclass(frozen=True)
class QuantizedAmounts:
    synthetic: int
    collateral: int
    fee: int
    # Human-scale intermediates kept for logging and assertions.
    collateral_amount: Decimal
    fee_amount: Decimal


def _exact_precision(*values: Decimal) -> int:
    """Digits sufficient for exact sums and products of ``values``."""
    digits = 0
    for value in values:
        if not value.is_finite():
            raise ValueError(f"amount must be finite, got {value}")
        _, value_digits, exponent = value.as_tuple()
        digits += len(value_digits) + abs(exponent)
    return max(_MIN_PRECISION, digits + 1)


def quantize(
    market: Market,
    side: OrderSide,
    synthetic_amount: Decimal,
    price: Decimal,
    taker_fee_rate: Decimal,
    builder_fee_rate: Optional[Decimal] = None,
) -> QuantizedAmounts:
    """Scale, round and sign the amounts hashed into an order.

    Args:
        market: Market supplying the collateral and synthetic resolutions.
        side: Validated order side.
        synthetic_amount: Order quantity in human units.
        price: Limit price in collateral per synthetic.
        taker_fee_rate: Fee rate charged by the venue.
        builder_fee_rate: Optional extra rate charged by the order's builder.

    Returns:
        The signed integer amounts in venue units.
    """
    l2 = market.l2_config
    builder_rate = builder_fee_rate if builder_fee_rate is not None else Decimal(0)
    with decimal.localcontext() as ctx:
        ctx.prec = _exact_precision(
            synthetic_amount,
            price,
            taker_fee_rate,
            builder_rate,
            Decimal(l2.collateral_resolution),
            Decimal(l2.synthetic_resolution),
        )
        ctx.traps[decimal.Inexact] = True
        collateral_amount = synthetic_amount * price
        total_fee_rate = taker_fee_rate + builder_rate
        fee_amount = total_fee_rate * collateral_amount

        collateral_scaled = collateral_amount * l2.collateral_resolution
        synthetic_scaled = synthetic_amount * l2.synthetic_resolution
        fee_scaled = fee_amount * l2.collateral_resolution

        rounding = ROUND_CEILING if side is OrderSide.BUY else ROUND_FLOOR
        collateral = int(collateral_scaled.to_integral_value(rounding=rounding))
        synthetic = int(synthetic_scaled.to_integral_value(rounding=rounding))
        fee = int(fee_scaled.to_integral_value(rounding=ROUND_CEILING))

    if side is OrderSide.BUY:
        collateral = -collateral
    else:
        synthetic = -synthetic

    return QuantizedAmounts(
        synthetic=synthetic,
        collateral=collateral,
        fee=fee,
        collateral_amount=collateral_amount,
        fee_amount=fee_amount,
    )
