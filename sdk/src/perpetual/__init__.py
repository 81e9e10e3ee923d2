"""
perpetual
=========

Order object builder for a Stark-based perpetual futures venue.  The main
entry point is :func:`build_signed_order`, which turns an
:class:`OrderRequest` into a signed, wire-ready :class:`SignedOrder`.
Submission helpers live in :mod:`perpetual.services`.
"""

from .account import TradingAccount  # noqa: F401
from .errors import (  # noqa: F401
    ExchangeApiError,
    HashComputationFailed,
    InvalidSide,
    MissingExpiry,
    MissingNonce,
    OrderBuildError,
    OrderIdMismatch,
    SigningFailed,
    UnsupportedTimeInForce,
)
from .models import (  # noqa: F401
    DEFAULT_FEES,
    ConditionalTrigger,
    ExecutionPriceType,
    L2Config,
    Market,
    OrderRequest,
    OrderSide,
    OrderType,
    SelfTradeProtectionLevel,
    SignedOrder,
    StarknetDomain,
    TimeInForce,
    TpSlTriggerParam,
    TpSlType,
    TradingFee,
    TriggerDirection,
    TriggerPriceType,
)
from .order_object import build_signed_order  # noqa: F401
from .signing import CallableSigner, OrderSigner  # noqa: F401

__version__ = "0.1.0"
