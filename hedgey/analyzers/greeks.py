"""Simplified risk sensitivities for lending positions.

Option terminology is used loosely: delta is directional USD exposure,
gamma re-expresses portfolio leverage, vega is the cost of a borrow-rate
shock and theta is the daily net carry.
"""
from __future__ import annotations

from collections.abc import Sequence

from ..models import Analysis, AssetDelta, Delta, Gamma, Greeks, LendingPosition, Theta, Vega

DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12
DEFAULT_RATE_SHOCK = 0.01  # one percentage point


def calc_delta(positions: Sequence[LendingPosition]) -> Delta:
    nets: dict[str, float] = {}
    deltas: dict[str, float] = {}
    for p in positions:
        net = p.supplied - p.borrowed
        nets[p.asset] = nets.get(p.asset, 0.0) + net
        deltas[p.asset] = deltas.get(p.asset, 0.0) + net * p.price

    return Delta(
        total_delta_usd=sum(deltas.values()),
        by_asset={a: AssetDelta(net=nets[a], delta_usd=deltas[a]) for a in nets},
    )


def calc_vega(positions: Sequence[LendingPosition], rate_shock: float = DEFAULT_RATE_SHOCK) -> Vega:
    yearly = sum(p.borrowed_usd for p in positions) * rate_shock
    return Vega(rate_impact_monthly=yearly / MONTHS_PER_YEAR, rate_impact_yearly=yearly)


def calc_theta(positions: Sequence[LendingPosition]) -> Theta:
    supply = sum(p.supplied_usd * p.supply_apr for p in positions)
    borrow = sum(p.borrowed_usd * p.borrow_apr for p in positions)
    daily = (supply - borrow) / DAYS_PER_YEAR / 100
    return Theta(
        daily_net=daily,
        monthly_net=daily * DAYS_PER_MONTH,
        yearly_net=daily * DAYS_PER_YEAR,
    )


class GreeksCalculator:
    def __init__(self, rate_shock: float = DEFAULT_RATE_SHOCK) -> None:
        self._rate_shock = rate_shock

    def calculate(self, positions: Sequence[LendingPosition], analysis: Analysis) -> Greeks:
        return Greeks(
            delta=calc_delta(positions),
            gamma=Gamma(leverage=analysis.leverage),
            vega=calc_vega(positions, self._rate_shock),
            theta=calc_theta(positions),
        )


def calculate_greeks(
    positions: Sequence[LendingPosition],
    analysis: Analysis,
    rate_shock: float = DEFAULT_RATE_SHOCK,
) -> Greeks:
    return GreeksCalculator(rate_shock).calculate(positions, analysis)
