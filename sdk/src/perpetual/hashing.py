"""
Order hash assembly.

The hashing primitive itself (a Pedersen/Poseidon style message hash over
the Stark field) lives outside this package.  This module arranges the
order's derived fields into the primitive's positional contract:

    position_id, base_asset_id, base_amount, quote_asset_id, quote_amount,
    fee_asset_id, fee_amount, expiration, salt, user_public_key,
    domain_name, domain_version, domain_chain_id, domain_revision

Integers are encoded as base-10 strings, asset ids and the public key stay
hex, domain fields are passed through.  The fee asset is always the
collateral asset.  Any change to this ordering or encoding yields a
different hash for the same order.
"""

from __future__ import annotations

import logging
from dataclasses import astuple, dataclass
from typing import Callable, Tuple, Union

from .errors import HashComputationFailed
from .models import StarknetDomain

logger = logging.getLogger(__name__)

# (position_id, base_asset_id, base_amount, ..., domain_revision) -> hash
OrderHashFn = Callable[..., Union[int, str]]


@dataclass(frozen=True)
class HashInputs:
    position_id: str
    base_asset_id: str
    base_amount: str
    quote_asset_id: str
    quote_amount: str
    fee_asset_id: str
    fee_amount: str
    expiration: str
    salt: str
    user_public_key: str
    domain_name: str
    domain_version: str
    domain_chain_id: str
    domain_revision: str

    @classmethod
    def build(
        cls,
        *,
        position_id: int,
        synthetic_asset_id: str,
        synthetic_amount: int,
        collateral_asset_id: str,
        collateral_amount: int,
        fee_amount: int,
        expiration_seconds: int,
        nonce: int,
        public_key: str,
        domain: StarknetDomain,
    ) -> "HashInputs":
        return cls(
            position_id=str(position_id),
            base_asset_id=synthetic_asset_id,
            base_amount=str(synthetic_amount),
            quote_asset_id=collateral_asset_id,
            quote_amount=str(collateral_amount),
            fee_asset_id=collateral_asset_id,
            fee_amount=str(fee_amount),
            expiration=str(expiration_seconds),
            salt=str(nonce),
            user_public_key=public_key,
            domain_name=domain.name,
            domain_version=domain.version,
            domain_chain_id=domain.chain_id,
            domain_revision=domain.revision,
        )

    def as_args(self) -> Tuple[str, ...]:
        """Positional arguments in the hashing primitive's order."""
        return astuple(self)


def normalize_hash(value: Union[int, str]) -> str:
    """Return the decimal-string form of a hash given as int, decimal or ``0x`` hex."""
    if isinstance(value, bool):
        raise TypeError("hash must be an integer or string, got bool")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            number = int(text, 16)
        else:
            number = int(text, 10)
    else:
        raise TypeError(f"hash must be an integer or string, got {type(value).__name__}")
    if number < 0:
        raise ValueError("hash must be non-negative")
    return str(number)


def compute_order_hash(inputs: HashInputs, hasher: OrderHashFn) -> str:
    """Invoke ``hasher`` on ``inputs`` and return the hash as a decimal string."""
    try:
        raw = hasher(*inputs.as_args())
        order_hash = normalize_hash(raw)
    except Exception as exc:
        logger.error("Order hash computation failed for position %s: %s", inputs.position_id, exc)
        raise HashComputationFailed(
            f"hashing order failed: {exc}", field="order_hash", value=inputs
        ) from exc
    logger.debug("Order hash %s (salt=%s, expiration=%s)", order_hash, inputs.salt, inputs.expiration)
    return order_hash
