"""Service layer.

This package wires the order pipeline to an exchange client: building and
submitting orders, and keeping account fee caches current.
"""

from __future__ import annotations

import logging

from ..clients import ExchangeHttpClient, PaperExchangeClient
from ..config import dry_run_enabled, load_endpoint_config, load_trading_account
from .fee_service import FeeService  # noqa: F401
from .order_service import OrderService, generate_nonce  # noqa: F401

logger = logging.getLogger(__name__)


def build_order_service() -> OrderService:
    """Create an :class:`OrderService` from environment configuration.

    ``DRY_RUN`` (default true) routes submissions to the paper client.
    """
    endpoint = load_endpoint_config()
    account = load_trading_account()
    if dry_run_enabled():
        logger.info("DRY_RUN enabled: orders go to the paper exchange")
        client = PaperExchangeClient()
    else:
        client = ExchangeHttpClient(api_key=account.api_key, base_url=endpoint.api_base_url)
    return OrderService(account, client, endpoint.starknet_domain)
