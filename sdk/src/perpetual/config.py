"""
Endpoint and account configuration.

Configuration is read from environment variables, matching how the rest of
the deployment is configured:

* ``PERP_NETWORK``: ``testnet`` (default) or ``mainnet``.
* ``PERP_API_BASE_URL``: overrides the REST base URL of the chosen network.
* ``PERP_VAULT``: the account's vault (position) id.
* ``PERP_PUBLIC_KEY`` / ``PERP_PRIVATE_KEY``: ``0x`` hex Stark keys.  If
  ``PERP_PRIVATE_KEY_FILE`` is set the key is read from that file instead,
  so it can be mounted as a container secret.
* ``PERP_API_KEY``: API key sent with every REST request.
* ``DRY_RUN``: when true (default) orders go to the paper client.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .account import TradingAccount
from .models import StarknetDomain

logger = logging.getLogger(__name__)


class EndpointConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_base_url: str
    starknet_domain: StarknetDomain


TESTNET_CONFIG = EndpointConfig(
    api_base_url="https://api.starknet.sepolia.extended.exchange/api/v1",
    starknet_domain=StarknetDomain(name="Perpetuals", version="v0", chain_id="SN_SEPOLIA", revision="1"),
)

MAINNET_CONFIG = EndpointConfig(
    api_base_url="https://api.starknet.extended.exchange/api/v1",
    starknet_domain=StarknetDomain(name="Perpetuals", version="v0", chain_id="SN_MAIN", revision="1"),
)

_NETWORKS = {"testnet": TESTNET_CONFIG, "mainnet": MAINNET_CONFIG}


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() not in ("false", "0", "no")


def dry_run_enabled() -> bool:
    return _env_flag("DRY_RUN", "true")


def load_endpoint_config() -> EndpointConfig:
    network = os.environ.get("PERP_NETWORK", "testnet").strip().lower()
    if network not in _NETWORKS:
        raise ValueError(f"PERP_NETWORK must be one of {sorted(_NETWORKS)}, got {network!r}")
    config = _NETWORKS[network]
    base_url = os.environ.get("PERP_API_BASE_URL")
    if base_url:
        config = config.model_copy(update={"api_base_url": base_url.rstrip("/")})
    return config


def _read_secret(name: str) -> Optional[str]:
    """Return ``$name``, or the contents of the file named by ``${name}_FILE``."""
    file_path = os.environ.get(f"{name}_FILE")
    if file_path:
        path = Path(file_path)
        if not path.exists():
            raise ValueError(f"{name}_FILE points to a missing file: {file_path}")
        logger.debug("Loaded %s from %s", name, file_path)
        return path.read_text(encoding="utf-8").strip()
    value = os.environ.get(name)
    return value.strip() if value else None


def load_trading_account() -> TradingAccount:
    vault = os.environ.get("PERP_VAULT")
    public_key = os.environ.get("PERP_PUBLIC_KEY")
    if not vault or not public_key:
        raise ValueError("PERP_VAULT and PERP_PUBLIC_KEY must be set")
    try:
        vault_id = int(vault)
    except ValueError as exc:
        raise ValueError(f"PERP_VAULT must be an integer, got {vault!r}") from exc
    return TradingAccount(
        vault=vault_id,
        public_key=public_key.strip(),
        private_key=_read_secret("PERP_PRIVATE_KEY"),
        api_key=os.environ.get("PERP_API_KEY", ""),
    )
