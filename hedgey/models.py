"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Direction = Literal["LONG", "SHORT", "NEUTRAL"]
LeverageType = Literal["cross", "isolated"]

LONG: Direction = "LONG"
SHORT: Direction = "SHORT"
NEUTRAL: Direction = "NEUTRAL"


def direction_of(value: float) -> Direction:
    """LONG for positive values, SHORT for negative, NEUTRAL otherwise."""
    if value > 0:
        return LONG
    if value < 0:
        return SHORT
    return NEUTRAL


class _Record:
    """Mixin for result records that render to plain dicts."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LendingPosition:
    """One asset row held on the lending protocol."""

    asset: str
    name: str
    supplied: float
    borrowed: float
    supplied_usd: float
    borrowed_usd: float
    supply_apr: float
    borrow_apr: float
    liquidation_threshold: float
    liquidation_bonus: float
    price: float
    decimals: int
    chain: str = ""

    @property
    def net_usd(self) -> float:
        return self.supplied_usd - self.borrowed_usd


@dataclass(frozen=True)
class HedgePosition:
    """One open perpetual position (at most one per coin per account)."""

    coin: str
    size: float
    side: Direction
    entry_price: float
    leverage: float
    leverage_type: LeverageType
    unrealized_pnl: float
    notional_value: float
    funding_rate: float
    funding_rate_annualized: float

    @property
    def is_open(self) -> bool:
        return self.side != NEUTRAL and self.size != 0


# ---------------------------------------------------------------------------
# Exposure analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssetExposure(_Record):
    supplied: float
    borrowed: float
    supplied_usd: float
    borrowed_usd: float
    net: float
    net_usd: float
    direction: Direction


@dataclass(frozen=True)
class LoopPosition(_Record):
    """An asset both supplied and borrowed at the same time."""

    asset: str
    supplied: float
    borrowed: float
    effective_leverage: float


@dataclass(frozen=True)
class Analysis(_Record):
    total_supplied_usd: float
    total_borrowed_usd: float
    net_value_usd: float
    health_factor: float
    leverage: float
    utilization_rate: float
    net_apy: float
    by_asset: dict[str, AssetExposure] = field(default_factory=dict)
    loops: tuple[LoopPosition, ...] = ()


# ---------------------------------------------------------------------------
# Hedge analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LendingLeg(_Record):
    net: float
    net_usd: float
    direction: Direction


@dataclass(frozen=True)
class HedgeLeg(_Record):
    size: float
    size_usd: float
    side: Direction
    leverage: float
    unrealized_pnl: float
    funding_rate: float
    funding_rate_annualized: float

    @classmethod
    def empty(cls) -> HedgeLeg:
        return cls(
            size=0.0,
            size_usd=0.0,
            side=NEUTRAL,
            leverage=0.0,
            unrealized_pnl=0.0,
            funding_rate=0.0,
            funding_rate_annualized=0.0,
        )

    @property
    def signed_size(self) -> float:
        if self.side == SHORT:
            return -self.size
        if self.side == LONG:
            return self.size
        return 0.0

    @property
    def signed_size_usd(self) -> float:
        if self.side == SHORT:
            return -self.size_usd
        if self.side == LONG:
            return self.size_usd
        return 0.0


@dataclass(frozen=True)
class NetExposure(_Record):
    amount: float
    amount_usd: float
    direction: Direction


@dataclass(frozen=True)
class CombinedExposure(_Record):
    """Lending and perp legs for one normalized symbol."""

    asset: str
    aave_exposure: LendingLeg
    hyperliquid_exposure: HedgeLeg
    net_exposure: NetExposure
    hedge_ratio: float
    price: float


@dataclass(frozen=True)
class HedgeTotals(_Record):
    aave_total_usd: float
    aave_equity_usd: float
    hyperliquid_total_usd: float
    hyperliquid_margin_usd: float
    total_capital_usd: float
    net_exposure_usd: float
    overall_hedge_ratio: float


@dataclass(frozen=True)
class EffectivenessThresholds(_Record):
    """Hedge-ratio bands (percent) used to bucket per-asset hedges."""

    perfect_min: float = 95.0
    perfect_max: float = 105.0
    partial_min: float = 20.0


@dataclass(frozen=True)
class HedgeEffectiveness(_Record):
    perfectly_hedged: tuple[str, ...] = ()
    partially_hedged: tuple[str, ...] = ()
    unhedged: tuple[str, ...] = ()
    over_hedged: tuple[str, ...] = ()


@dataclass(frozen=True)
class HedgeAnalysis(_Record):
    by_asset: dict[str, CombinedExposure]
    totals: HedgeTotals
    aave_net_apy: float
    hyperliquid_funding_apy: float
    combined_net_apy: float
    effectiveness: HedgeEffectiveness


# ---------------------------------------------------------------------------
# Greeks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssetDelta(_Record):
    net: float
    delta_usd: float


@dataclass(frozen=True)
class Delta(_Record):
    total_delta_usd: float
    by_asset: dict[str, AssetDelta] = field(default_factory=dict)


@dataclass(frozen=True)
class Gamma(_Record):
    leverage: float


@dataclass(frozen=True)
class Vega(_Record):
    """Cost impact of a borrow-rate shock."""

    rate_impact_monthly: float
    rate_impact_yearly: float


@dataclass(frozen=True)
class Theta(_Record):
    """Net carry projections, linear scaling."""

    daily_net: float
    monthly_net: float
    yearly_net: float


@dataclass(frozen=True)
class Greeks(_Record):
    delta: Delta
    gamma: Gamma
    vega: Vega
    theta: Theta
