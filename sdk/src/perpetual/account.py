"""
Trading account: vault, Stark keys, API key and the per-account fee cache.

The account doubles as the default order signer when it holds a private
key.  Signing is delegated to :mod:`perpetual.clients.stark_crypto`; the
private key is never exposed through the public interface or logs.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from .clients import stark_crypto
from .fees import FeeCache
from .signing import OrderSigner

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")


def _validate_hex_key(value: str, name: str) -> str:
    if not value:
        raise ValueError(f"invalid {name}: empty hex string")
    if not value.startswith("0x"):
        raise ValueError(f"{name} must start with 0x")
    if not _HEX_RE.match(value):
        raise ValueError(f"invalid {name}: not a hex string")
    return value


class TradingAccount(OrderSigner):
    """A Stark perpetual sub-account."""

    def __init__(
        self,
        vault: int,
        public_key: str,
        private_key: Optional[str] = None,
        api_key: str = "",
    ) -> None:
        if vault < 0:
            raise ValueError(f"vault must be non-negative, got {vault}")
        self.vault = int(vault)
        self.public_key = _validate_hex_key(public_key, "public key")
        self._private_key = _validate_hex_key(private_key, "private key") if private_key is not None else None
        if api_key.startswith("0x"):
            raise ValueError("api key should not start with 0x")
        self.api_key = api_key
        self.fees = FeeCache()

    @property
    def position_id(self) -> int:
        return self.vault

    @property
    def can_sign(self) -> bool:
        return self._private_key is not None

    def sign(self, message_hash: str) -> Tuple[int, int]:
        if not message_hash:
            raise ValueError("message hash is empty")
        if self._private_key is None:
            raise RuntimeError("account has no private key; supply a signer explicitly")
        return stark_crypto.sign_message(self._private_key, message_hash)

    def __repr__(self) -> str:
        return f"TradingAccount(vault={self.vault}, public_key={self.public_key!r})"
