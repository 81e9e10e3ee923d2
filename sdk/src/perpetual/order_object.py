"""
Signed order construction.

``build_signed_order`` is the single entry point that turns an
:class:`~perpetual.models.OrderRequest` into a wire-ready
:class:`~perpetual.models.SignedOrder`:

1. validate side, time in force, expiry and nonce;
2. resolve the account's fee schedule for the market;
3. quantize the amounts (:mod:`perpetual.quantization`);
4. hash them with the buffered expiry (:mod:`perpetual.hashing`);
5. sign the hash (:mod:`perpetual.signing`);
6. assemble the payload, defaulting the external id to the hash.

Take-profit and stop-loss legs get their own settlement, produced by the
same steps for the opposite side at the trigger's execution price.  The
build is all-or-nothing: any failure raises an
:class:`~perpetual.errors.OrderBuildError` subclass and nothing is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from . import telemetry
from .account import TradingAccount
from .clients import stark_crypto
from .config import load_endpoint_config
from .errors import InvalidSide, MissingNonce, OrderBuildError, UnsupportedTimeInForce
from .expiry import NormalizedExpiry, normalize
from .fees import resolve_fees
from .hashing import HashInputs, OrderHashFn, compute_order_hash
from .models import (
    SUPPORTED_TIME_IN_FORCE,
    ConditionalTrigger,
    ConditionalTriggerModel,
    Market,
    OrderRequest,
    OrderSide,
    Settlement,
    SignedOrder,
    StarknetDomain,
    TimeInForce,
    TpSlTrigger,
    TpSlTriggerParam,
    TradingFee,
    format_decimal,
)
from .quantization import QuantizedAmounts, quantize
from .signing import OrderSigner, sign_order_hash

logger = logging.getLogger(__name__)


def _coerce_side(value) -> OrderSide:
    try:
        return OrderSide(value)
    except ValueError as exc:
        raise InvalidSide(value) from exc


def _coerce_time_in_force(value) -> TimeInForce:
    try:
        tif = TimeInForce(value)
    except ValueError as exc:
        raise UnsupportedTimeInForce(value) from exc
    if tif not in SUPPORTED_TIME_IN_FORCE:
        raise UnsupportedTimeInForce(tif.value)
    return tif


def opposite_side(side: OrderSide) -> OrderSide:
    return OrderSide.SELL if side is OrderSide.BUY else OrderSide.BUY


@dataclass(frozen=True)
class SettlementContext:
    """Inputs shared by every settlement signed for one order."""

    market: Market
    public_key: str
    position_id: int
    fees: TradingFee
    builder_fee: Optional[Decimal]
    nonce: int
    expiry: NormalizedExpiry
    domain: StarknetDomain
    signer: OrderSigner
    hasher: OrderHashFn


def settle(
    ctx: SettlementContext, side: OrderSide, synthetic_amount: Decimal, price: Decimal
) -> Tuple[str, Settlement, QuantizedAmounts]:
    """Quantize, hash and sign one leg; return its hash, settlement and amounts."""
    l2 = ctx.market.l2_config
    amounts = quantize(
        ctx.market,
        side,
        synthetic_amount,
        price,
        ctx.fees.taker_fee_rate,
        ctx.builder_fee,
    )
    logger.debug(
        "Quantized %s %s %s@%s: synthetic=%d collateral=%d fee=%d",
        ctx.market.name,
        side.value,
        synthetic_amount,
        price,
        amounts.synthetic,
        amounts.collateral,
        amounts.fee,
    )
    inputs = HashInputs.build(
        position_id=ctx.position_id,
        synthetic_asset_id=l2.synthetic_id,
        synthetic_amount=amounts.synthetic,
        collateral_asset_id=l2.collateral_id,
        collateral_amount=amounts.collateral,
        fee_amount=amounts.fee,
        expiration_seconds=ctx.expiry.expiration_seconds,
        nonce=ctx.nonce,
        public_key=ctx.public_key,
        domain=ctx.domain,
    )
    order_hash = compute_order_hash(inputs, ctx.hasher)
    signature = sign_order_hash(order_hash, ctx.signer)
    settlement = Settlement(
        signature=signature,
        stark_key=ctx.public_key,
        collateral_position=str(ctx.position_id),
    )
    return order_hash, settlement, amounts


def _tpsl_trigger(ctx: SettlementContext, side: OrderSide, amount: Decimal, param: TpSlTriggerParam) -> TpSlTrigger:
    _, settlement, _ = settle(ctx, opposite_side(side), amount, param.price)
    return TpSlTrigger(
        trigger_price=format_decimal(param.trigger_price),
        trigger_price_type=param.trigger_price_type,
        price=format_decimal(param.price),
        price_type=param.price_type,
        settlement=settlement,
    )


def _conditional_trigger(trigger: ConditionalTrigger) -> ConditionalTriggerModel:
    return ConditionalTriggerModel(
        trigger_price=format_decimal(trigger.trigger_price),
        trigger_price_type=trigger.trigger_price_type,
        direction=trigger.direction,
        execution_price_type=trigger.execution_price_type,
    )


def assemble(
    request: OrderRequest,
    market: Market,
    side: OrderSide,
    time_in_force: TimeInForce,
    order_hash: str,
    settlement: Settlement,
    fees: TradingFee,
    expiry: NormalizedExpiry,
    nonce: int,
    take_profit: Optional[TpSlTrigger] = None,
    stop_loss: Optional[TpSlTrigger] = None,
) -> SignedOrder:
    """Merge derived values and pass-through request fields into the payload."""
    order_id = request.order_external_id if request.order_external_id is not None else order_hash
    return SignedOrder(
        id=order_id,
        market=market.name,
        type=request.order_type,
        side=side,
        qty=format_decimal(request.synthetic_amount),
        price=format_decimal(request.price),
        time_in_force=time_in_force,
        expiry_epoch_millis=expiry.expiry_epoch_millis,
        fee=format_decimal(fees.taker_fee_rate),
        nonce=str(nonce),
        settlement=settlement,
        reduce_only=request.reduce_only,
        post_only=request.post_only,
        self_trade_protection_level=request.self_trade_protection_level,
        trigger=_conditional_trigger(request.trigger) if request.trigger is not None else None,
        tp_sl_type=request.tp_sl_type,
        take_profit=take_profit,
        stop_loss=stop_loss,
        builder_fee=format_decimal(request.builder_fee) if request.builder_fee is not None else None,
        builder_id=request.builder_id,
        cancel_id=request.previous_order_external_id,
    )


def build_signed_order(
    account: TradingAccount,
    market: Market,
    request: OrderRequest,
    *,
    domain: Optional[StarknetDomain] = None,
    signer: Optional[OrderSigner] = None,
    hasher: Optional[OrderHashFn] = None,
) -> SignedOrder:
    """Build and sign an order for ``account`` on ``market``.

    Args:
        account: Account whose vault, public key and fee cache are used.
        market: Market supplying asset ids and resolutions.
        request: Caller intent; ``expire_time`` and ``nonce`` must be set.
        domain: Hash domain; defaults to the configured network's domain.
        signer: Signing capability; defaults to ``account`` itself.
        hasher: Order hash primitive; defaults to ``fast-stark-crypto``.

    Returns:
        The signed order, ready for submission.

    Raises:
        OrderBuildError: On any validation, hashing or signing failure.
    """
    try:
        side = _coerce_side(request.side)
        time_in_force = _coerce_time_in_force(request.time_in_force)
        expiry = normalize(request.expire_time)
        if request.nonce is None:
            raise MissingNonce()

        if domain is None:
            domain = load_endpoint_config().starknet_domain
        fees = resolve_fees(account, market.name)
        ctx = SettlementContext(
            market=market,
            public_key=account.public_key,
            position_id=account.position_id,
            fees=fees,
            builder_fee=request.builder_fee,
            nonce=request.nonce,
            expiry=expiry,
            domain=domain,
            signer=signer if signer is not None else account,
            hasher=hasher if hasher is not None else stark_crypto.get_order_hash,
        )

        order_hash, settlement, _ = settle(ctx, side, request.synthetic_amount, request.price)
        take_profit = (
            _tpsl_trigger(ctx, side, request.synthetic_amount, request.take_profit)
            if request.take_profit is not None
            else None
        )
        stop_loss = (
            _tpsl_trigger(ctx, side, request.synthetic_amount, request.stop_loss)
            if request.stop_loss is not None
            else None
        )
    except OrderBuildError as exc:
        telemetry.ORDER_BUILD_FAILURES.labels(reason=exc.reason).inc()
        logger.warning("Rejected order on %s: %s", market.name, exc)
        raise

    order = assemble(
        request,
        market,
        side,
        time_in_force,
        order_hash,
        settlement,
        fees,
        expiry,
        request.nonce,
        take_profit=take_profit,
        stop_loss=stop_loss,
    )
    telemetry.ORDERS_SIGNED.labels(market=market.name, side=side.value).inc()
    return order
