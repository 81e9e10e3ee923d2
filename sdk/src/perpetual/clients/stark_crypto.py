"""
stark_crypto
============

Thin wrapper around ``fast-stark-crypto``, the Rust-backed library that
implements the venue's order message hash and the Stark curve ECDSA
signature.  The order pipeline only depends on the call shapes defined in
:mod:`perpetual.hashing` and :mod:`perpetual.signing`; this module adapts
the library to them.

Install with ``pip install perpetual-orders[stark]``.  When the library is
missing, importing this module still succeeds but calling either function
raises ``RuntimeError``.
"""

from __future__ import annotations

from typing import Tuple

try:
    import fast_stark_crypto  # type: ignore
except Exception:
    fast_stark_crypto = None  # type: ignore


def _require_backend():
    if fast_stark_crypto is None:
        raise RuntimeError(
            "fast-stark-crypto not available. Install 'perpetual-orders[stark]' to hash and sign orders."
        )
    return fast_stark_crypto


def _hex_to_int(value: str) -> int:
    return int(value, 16)


def get_order_hash(
    position_id: str,
    base_asset_id: str,
    base_amount: str,
    quote_asset_id: str,
    quote_amount: str,
    fee_asset_id: str,
    fee_amount: str,
    expiration: str,
    salt: str,
    user_public_key: str,
    domain_name: str,
    domain_version: str,
    domain_chain_id: str,
    domain_revision: str,
) -> int:
    """Compute the order message hash; hex and decimal strings are parsed here."""
    backend = _require_backend()
    return backend.get_order_msg_hash(
        position_id=int(position_id),
        base_asset_id=_hex_to_int(base_asset_id),
        base_amount=int(base_amount),
        quote_asset_id=_hex_to_int(quote_asset_id),
        quote_amount=int(quote_amount),
        fee_asset_id=_hex_to_int(fee_asset_id),
        fee_amount=int(fee_amount),
        expiration=int(expiration),
        salt=int(salt),
        user_public_key=_hex_to_int(user_public_key),
        domain_name=domain_name,
        domain_version=domain_version,
        domain_chain_id=domain_chain_id,
        domain_revision=domain_revision,
    )


def sign_message(private_key: str, message_hash: str) -> Tuple[int, int]:
    """Sign a decimal-string message hash with a ``0x`` hex private key."""
    backend = _require_backend()
    r, s = backend.sign(private_key=_hex_to_int(private_key), msg_hash=int(message_hash))
    return int(r), int(s)
