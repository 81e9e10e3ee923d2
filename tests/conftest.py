"""Pytest configuration for path setup and shared fixtures.

The package lives under ``sdk/src``.  When pytest is executed without the
package installed, that directory is not on ``sys.path``; this file puts
it (and the repository root, for ``tests.helpers``) at the front so the
suite can be collected either way.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]

for path in (ROOT / "sdk" / "src", ROOT):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from perpetual.account import TradingAccount  # noqa: E402
from perpetual.models import L2Config, Market, StarknetDomain  # noqa: E402

from tests.helpers.fake_crypto import RecordingHasher, RecordingSigner  # noqa: E402
from tests.helpers.sample_data import BTC_COLLATERAL_ID, BTC_SYNTHETIC_ID, PRIVATE_KEY, PUBLIC_KEY  # noqa: E402


@pytest.fixture
def btc_market() -> Market:
    return Market(
        name="BTC-USD",
        asset_name="BTC",
        asset_precision=5,
        collateral_asset_name="USD",
        collateral_asset_precision=6,
        l2_config=L2Config(
            collateral_id=BTC_COLLATERAL_ID,
            collateral_resolution=1_000_000,
            synthetic_id=BTC_SYNTHETIC_ID,
            synthetic_resolution=1_000_000,
        ),
    )


@pytest.fixture
def domain() -> StarknetDomain:
    return StarknetDomain(name="Perpetuals", version="v0", chain_id="SN_SEPOLIA", revision="1")


@pytest.fixture
def account() -> TradingAccount:
    return TradingAccount(vault=10002, public_key=PUBLIC_KEY, private_key=PRIVATE_KEY, api_key="test-api-key")


@pytest.fixture
def hasher() -> RecordingHasher:
    return RecordingHasher()


@pytest.fixture
def signer() -> RecordingSigner:
    return RecordingSigner()
