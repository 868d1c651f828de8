"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from hedgey.config import AnalysisConfig, AppConfig, EffectivenessThresholds, SymbolsConfig
from hedgey.models import HedgePosition, LendingPosition


def _lending(
    asset: str,
    supplied: float = 0.0,
    borrowed: float = 0.0,
    price: float = 1.0,
    supply_apr: float = 0.0,
    borrow_apr: float = 0.0,
    liquidation_threshold: float = 0.8,
) -> LendingPosition:
    """Build a lending row with USD values derived from amount × price."""
    return LendingPosition(
        asset=asset,
        name=asset,
        supplied=supplied,
        borrowed=borrowed,
        supplied_usd=supplied * price,
        borrowed_usd=borrowed * price,
        supply_apr=supply_apr,
        borrow_apr=borrow_apr,
        liquidation_threshold=liquidation_threshold,
        liquidation_bonus=0.05,
        price=price,
        decimals=18,
    )


def _hedge(
    coin: str,
    size: float,
    side: str = "SHORT",
    entry_price: float = 1.0,
    leverage: float = 1.0,
    funding_rate_annualized: float = 0.0,
) -> HedgePosition:
    return HedgePosition(
        coin=coin,
        size=size,
        side=side,  # type: ignore[arg-type]
        entry_price=entry_price,
        leverage=leverage,
        leverage_type="cross",
        unrealized_pnl=0.0,
        notional_value=size * entry_price,
        funding_rate=funding_rate_annualized / (24 * 365 * 100),
        funding_rate_annualized=funding_rate_annualized,
    )


# ---------------------------------------------------------------------------
# Position fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_lending():
    return _lending


@pytest.fixture()
def make_hedge():
    return _hedge


@pytest.fixture()
def sample_lending() -> list[LendingPosition]:
    """10 WETH supplied at $2000, 8000 USDC borrowed."""
    return [
        _lending(
            "WETH", supplied=10.0, price=2000.0, supply_apr=2.0, borrow_apr=3.0,
            liquidation_threshold=0.8,
        ),
        _lending(
            "USDC", borrowed=8000.0, price=1.0, supply_apr=4.0, borrow_apr=4.5,
            liquidation_threshold=0.78,
        ),
    ]


@pytest.fixture()
def sample_hedges() -> list[HedgePosition]:
    """8 ETH short at $2000, 4x, receiving 10.95% annualized funding."""
    return [
        _hedge(
            "ETH", 8.0, "SHORT", entry_price=2000.0, leverage=4.0,
            funding_rate_annualized=10.95,
        ),
    ]


@pytest.fixture()
def sample_prices() -> dict[str, float]:
    return {"ETH": 2000.0, "BTC": 60000.0, "USDC": 1.0}


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        analysis=AnalysisConfig(
            rate_shock=0.02,
            effectiveness=EffectivenessThresholds(
                perfect_min=90.0, perfect_max=110.0, partial_min=25.0
            ),
        ),
        symbols=SymbolsConfig(aliases={"cbETH": "ETH"}),
    )


SAMPLE_YAML = textwrap.dedent("""\
    analysis:
      rate_shock: 0.02
      effectiveness:
        perfect_min: 90.0
        perfect_max: 110.0
        partial_min: 25.0
    symbols:
      aliases: {cbETH: ETH, tBTC: BTC}
    snapshot: positions.yaml
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "hedgey.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Raw payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_raw_reserve() -> dict:
    return {
        "symbol": "WETH",
        "name": "Wrapped Ether",
        "decimals": 18,
        "currentATokenBalance": str(5 * 10**18),  # 5 WETH
        "currentVariableDebt": "0",
        "liquidityRate": str(10**20),  # → 3.15% APR
        "variableBorrowRate": "0",
        "liquidationThreshold": 0.825,
        "liquidationBonus": 1.05,
    }


@pytest.fixture()
def sample_asset_position() -> dict:
    return {
        "position": {
            "coin": "ETH",
            "szi": "-2.5",
            "entryPx": "2000.0",
            "leverage": {"type": "cross", "value": 5},
            "unrealizedPnl": "-12.5",
        }
    }


@pytest.fixture()
def sample_meta_and_ctxs() -> list:
    return [
        {"universe": [{"name": "BTC"}, {"name": "ETH"}, {"name": "SOL"}]},
        [{"funding": "0.00001"}, {"funding": "0.0000125"}, None],
    ]


SNAPSHOT_YAML = textwrap.dedent("""\
    chain: ethereum
    prices: {ETH: 2000.0, USDC: 1.0}
    lending:
      - asset: WETH
        supplied: 10
        price: 2000.0
        supply_apr: 2.0
        borrow_apr: 3.0
        liquidation_threshold: 0.8
      - asset: USDC
        borrowed: 8000
        price: 1.0
        supply_apr: 4.0
        borrow_apr: 4.5
        liquidation_threshold: 0.78
    hedges:
      - coin: ETH
        size: -8
        entry_price: 2000.0
        leverage: 4
        leverage_type: cross
        funding_rate_annualized: 10.95
""")


@pytest.fixture()
def sample_snapshot_path(tmp_path: Path) -> Path:
    path = tmp_path / "positions.yaml"
    path.write_text(SNAPSHOT_YAML)
    return path
