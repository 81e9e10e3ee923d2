"""
Signer abstraction and signature decoding.

A signer is any object with ``sign(message_hash) -> (r, s)``; the order
pipeline never sees the private key behind it.  :class:`TradingAccount`
is one such signer, :class:`CallableSigner` adapts a bare function.
"""

from __future__ import annotations

import logging
from typing import Callable, Tuple

from .errors import SigningFailed
from .models import Signature

logger = logging.getLogger(__name__)


class OrderSigner:
    """Abstract signing capability bound to one Stark private key."""

    def sign(self, message_hash: str) -> Tuple[int, int]:
        """Return the ``(r, s)`` signature of ``message_hash``.

        Subclasses must implement this method.
        """
        raise NotImplementedError


class CallableSigner(OrderSigner):
    """Wrap a ``(message_hash) -> (r, s)`` function as an :class:`OrderSigner`."""

    def __init__(self, fn: Callable[[str], Tuple[int, int]]) -> None:
        self._fn = fn

    def sign(self, message_hash: str) -> Tuple[int, int]:
        return self._fn(message_hash)


def _as_component(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"signature component {name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"signature component {name} must be non-negative")
    return value


def sign_order_hash(order_hash: str, signer: OrderSigner) -> Signature:
    """Sign ``order_hash`` and encode the result as ``0x``-prefixed hex."""
    if not order_hash:
        raise SigningFailed("signer function failed: message hash is empty", field="order_hash", value=order_hash)
    try:
        r, s = signer.sign(order_hash)
        r = _as_component(r, "r")
        s = _as_component(s, "s")
    except SigningFailed:
        raise
    except Exception as exc:
        logger.error("Signing order hash %s failed: %s", order_hash, exc)
        raise SigningFailed(f"signer function failed: {exc}", field="order_hash", value=order_hash) from exc
    return Signature(r=f"0x{r:x}", s=f"0x{s:x}")
