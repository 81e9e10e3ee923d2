"""
Domain models for perpetual orders.

Wire-facing entities (markets, fee schedules, the signed order payload and
venue responses) are Pydantic models with camelCase aliases so that venue
JSON can be parsed directly and signed orders serialise to the exact field
names the venue expects.  Caller-side intent (``OrderRequest`` and the
trigger parameters) uses plain dataclasses: they never travel over the wire
as-is and are validated by the order pipeline itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    CONDITIONAL = "CONDITIONAL"
    TPSL = "TPSL"


class TimeInForce(str, Enum):
    GTT = "GTT"  # good till time
    IOC = "IOC"  # immediate or cancel
    FOK = "FOK"  # fill or kill


# Time-in-force values the order pipeline will sign.  FOK is part of the
# venue vocabulary but is rejected when building an order.
SUPPORTED_TIME_IN_FORCE: FrozenSet[TimeInForce] = frozenset({TimeInForce.GTT, TimeInForce.IOC})


class SelfTradeProtectionLevel(str, Enum):
    DISABLED = "DISABLED"
    ACCOUNT = "ACCOUNT"
    CLIENT = "CLIENT"


class TriggerPriceType(str, Enum):
    UNKNOWN = "UNKNOWN"
    LAST = "LAST"
    MID = "MID"
    MARK = "MARK"
    INDEX = "INDEX"


class TriggerDirection(str, Enum):
    UNKNOWN = "UNKNOWN"
    UP = "UP"
    DOWN = "DOWN"


class ExecutionPriceType(str, Enum):
    UNKNOWN = "UNKNOWN"
    LIMIT = "LIMIT"
    MARKET = "MARKET"


class TpSlType(str, Enum):
    ORDER = "ORDER"
    POSITION = "POSITION"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class StarknetDomain(_WireModel):
    """Domain separator strings mixed into every order hash."""

    name: str
    version: str
    chain_id: str = Field(..., alias="chainId")
    revision: str


class L2Config(_WireModel):
    type: str = "STARKX"
    collateral_id: str = Field(..., alias="collateralId")
    collateral_resolution: int = Field(..., gt=0, alias="collateralResolution")
    synthetic_id: str = Field(..., alias="syntheticId")
    synthetic_resolution: int = Field(..., gt=0, alias="syntheticResolution")


class Market(_WireModel):
    """A tradable pair as described by the venue's market listing."""

    name: str
    asset_name: str = Field("", alias="assetName")
    asset_precision: int = Field(0, alias="assetPrecision")
    collateral_asset_name: str = Field("", alias="collateralAssetName")
    collateral_asset_precision: int = Field(0, alias="collateralAssetPrecision")
    active: bool = True
    l2_config: L2Config = Field(..., alias="l2Config")


class TradingFee(_WireModel):
    market: Optional[str] = None
    maker_fee_rate: Decimal = Field(..., alias="makerFeeRate")
    taker_fee_rate: Decimal = Field(..., alias="takerFeeRate")
    builder_fee_rate: Decimal = Field(Decimal(0), alias="builderFeeRate")


# Fallback used when an account has no cached fee schedule for a market.
DEFAULT_FEES = TradingFee(
    maker_fee_rate=Decimal("0.0002"),
    taker_fee_rate=Decimal("0.0005"),
    builder_fee_rate=Decimal("0"),
)


class Signature(_WireModel):
    r: str
    s: str


class Settlement(_WireModel):
    signature: Signature
    stark_key: str = Field(..., alias="starkKey")
    collateral_position: str = Field(..., alias="collateralPosition")


class ConditionalTriggerModel(_WireModel):
    trigger_price: str = Field(..., alias="triggerPrice")
    trigger_price_type: TriggerPriceType = Field(..., alias="triggerPriceType")
    direction: TriggerDirection
    execution_price_type: ExecutionPriceType = Field(..., alias="executionPriceType")


class TpSlTrigger(_WireModel):
    trigger_price: str = Field(..., alias="triggerPrice")
    trigger_price_type: TriggerPriceType = Field(..., alias="triggerPriceType")
    price: str
    price_type: ExecutionPriceType = Field(..., alias="priceType")
    settlement: Settlement


class SignedOrder(_WireModel):
    """The signed order payload submitted to the venue."""

    id: str
    market: str
    type: OrderType
    side: OrderSide
    qty: str
    price: str
    time_in_force: TimeInForce = Field(..., alias="timeInForce")
    expiry_epoch_millis: int = Field(..., alias="expiryEpochMillis")
    fee: str
    nonce: str
    settlement: Settlement
    reduce_only: bool = Field(False, alias="reduceOnly")
    post_only: bool = Field(False, alias="postOnly")
    self_trade_protection_level: SelfTradeProtectionLevel = Field(..., alias="selfTradeProtectionLevel")
    trigger: Optional[ConditionalTriggerModel] = None
    tp_sl_type: Optional[TpSlType] = Field(None, alias="tpSlType")
    take_profit: Optional[TpSlTrigger] = Field(None, alias="takeProfit")
    stop_loss: Optional[TpSlTrigger] = Field(None, alias="stopLoss")
    builder_fee: Optional[str] = Field(None, alias="builderFee")
    builder_id: Optional[int] = Field(None, alias="builderId")
    cancel_id: Optional[str] = Field(None, alias="cancelId")

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON body for submission; absent optionals are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class OrderSubmissionData(_WireModel):
    id: int
    external_id: str = Field(..., alias="externalId")


class OrderResponse(_WireModel):
    status: str
    data: Optional[OrderSubmissionData] = None


class FeeResponse(_WireModel):
    status: str
    data: List[TradingFee] = Field(default_factory=list)


class MarketsResponse(_WireModel):
    status: str
    data: List[Market] = Field(default_factory=list)


DecimalLike = Union[Decimal, str, int]


def to_decimal(value: DecimalLike | float) -> Decimal:
    """Coerce user input to ``Decimal``; floats go through ``str`` to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def format_decimal(value: Decimal) -> str:
    """Render a decimal as plain fixed-point text with trailing zeros trimmed."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


@dataclass(frozen=True)
class TpSlTriggerParam:
    trigger_price: Decimal
    trigger_price_type: TriggerPriceType
    price: Decimal
    price_type: ExecutionPriceType

    def __post_init__(self) -> None:
        object.__setattr__(self, "trigger_price", to_decimal(self.trigger_price))
        object.__setattr__(self, "price", to_decimal(self.price))


@dataclass(frozen=True)
class ConditionalTrigger:
    trigger_price: Decimal
    trigger_price_type: TriggerPriceType
    direction: TriggerDirection
    execution_price_type: ExecutionPriceType

    def __post_init__(self) -> None:
        object.__setattr__(self, "trigger_price", to_decimal(self.trigger_price))


@dataclass
class OrderRequest:
    """Caller intent for a single order.

    ``side`` and ``time_in_force`` accept either the enum or its wire string;
    the order pipeline validates them.  ``expire_time`` and ``nonce`` may be
    left unset here and filled in by :class:`perpetual.services.OrderService`;
    the low-level pipeline requires both.
    """

    side: Union[OrderSide, str]
    synthetic_amount: Decimal
    price: Decimal
    time_in_force: Union[TimeInForce, str] = TimeInForce.GTT
    order_type: OrderType = OrderType.LIMIT
    self_trade_protection_level: SelfTradeProtectionLevel = SelfTradeProtectionLevel.ACCOUNT
    expire_time: Optional[datetime] = None
    nonce: Optional[int] = None
    previous_order_external_id: Optional[str] = None
    order_external_id: Optional[str] = None
    builder_fee: Optional[Decimal] = None
    builder_id: Optional[int] = None
    reduce_only: bool = False
    post_only: bool = False
    trigger: Optional[ConditionalTrigger] = None
    tp_sl_type: Optional[TpSlType] = None
    take_profit: Optional[TpSlTriggerParam] = None
    stop_loss: Optional[TpSlTriggerParam] = None

    def __post_init__(self) -> None:
        self.synthetic_amount = to_decimal(self.synthetic_amount)
        self.price = to_decimal(self.price)
        if self.synthetic_amount <= 0:
            raise ValueError(f"synthetic_amount must be positive, got {self.synthetic_amount}")
        if self.price <= 0:
            raise ValueError(f"price must be positive, got {self.price}")
        if self.builder_fee is not None:
            self.builder_fee = to_decimal(self.builder_fee)
