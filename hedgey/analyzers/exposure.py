"""Single-protocol solvency, leverage and yield summary, no I/O."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models import Analysis, AssetExposure, LendingPosition, LoopPosition, direction_of

logger = logging.getLogger(__name__)


def calc_health_factor(positions: Sequence[LendingPosition]) -> float:
    """Risk-weighted collateral over debt; ``inf`` when nothing is borrowed."""
    collateral = sum(p.supplied_usd * p.liquidation_threshold for p in positions)
    debt = sum(p.borrowed_usd for p in positions)
    if debt == 0:
        return float("inf")
    return collateral / debt


def calc_leverage(total_supplied_usd: float, net_value_usd: float) -> float:
    # A fully offset book reports 1x.
    if net_value_usd == 0:
        return 1.0
    return total_supplied_usd / net_value_usd


def calc_utilization(total_borrowed_usd: float, total_supplied_usd: float) -> float:
    if total_supplied_usd == 0:
        return 0.0
    return (total_borrowed_usd / total_supplied_usd) * 100


def calc_net_apy(positions: Sequence[LendingPosition], net_value_usd: float) -> float:
    """Net yearly interest as a percentage of equity."""
    if net_value_usd == 0:
        return 0.0
    income = sum(p.supplied_usd * (p.supply_apr / 100) for p in positions)
    cost = sum(p.borrowed_usd * (p.borrow_apr / 100) for p in positions)
    return ((income - cost) / net_value_usd) * 100


def aggregate_by_asset(
    positions: Sequence[LendingPosition],
) -> dict[str, AssetExposure]:
    """Sum rows per raw asset symbol (wrapped variants stay separate)."""
    sums: dict[str, list[float]] = {}
    for p in positions:
        row = sums.setdefault(p.asset, [0.0, 0.0, 0.0, 0.0])
        row[0] += p.supplied
        row[1] += p.borrowed
        row[2] += p.supplied_usd
        row[3] += p.borrowed_usd

    by_asset: dict[str, AssetExposure] = {}
    for asset, (supplied, borrowed, supplied_usd, borrowed_usd) in sums.items():
        net = supplied - borrowed
        by_asset[asset] = AssetExposure(
            supplied=supplied,
            borrowed=borrowed,
            supplied_usd=supplied_usd,
            borrowed_usd=borrowed_usd,
            net=net,
            net_usd=supplied_usd - borrowed_usd,
            direction=direction_of(net),
        )
    return by_asset


def detect_loops(by_asset: dict[str, AssetExposure]) -> tuple[LoopPosition, ...]:
    """Assets supplied and borrowed at once.

    effective_leverage = supplied / (supplied - borrowed); a loop where both
    sides are equal reports ``inf``.
    """
    loops: list[LoopPosition] = []
    for asset, exposure in by_asset.items():
        if exposure.supplied > 0 and exposure.borrowed > 0:
            equity = exposure.supplied - exposure.borrowed
            effective = exposure.supplied / equity if equity != 0 else float("inf")
            loops.append(
                LoopPosition(
                    asset=asset,
                    supplied=exposure.supplied,
                    borrowed=exposure.borrowed,
                    effective_leverage=effective,
                )
            )
    return tuple(loops)


class ExposureAnalyzer:
    """Summarise lending positions into an :class:`Analysis`."""

    def analyze(self, positions: Sequence[LendingPosition]) -> Analysis:
        total_supplied = sum(p.supplied_usd for p in positions)
        total_borrowed = sum(p.borrowed_usd for p in positions)
        net_value = total_supplied - total_borrowed
        by_asset = aggregate_by_asset(positions)

        analysis = Analysis(
            total_supplied_usd=total_supplied,
            total_borrowed_usd=total_borrowed,
            net_value_usd=net_value,
            health_factor=calc_health_factor(positions),
            leverage=calc_leverage(total_supplied, net_value),
            utilization_rate=calc_utilization(total_borrowed, total_supplied),
            net_apy=calc_net_apy(positions, net_value),
            by_asset=by_asset,
            loops=detect_loops(by_asset),
        )
        logger.debug(
            "Exposure: Supplied: $%.2f  Borrowed: $%.2f  HF: %.2f  Leverage: %.2fx  Loops: %d",
            analysis.total_supplied_usd,
            analysis.total_borrowed_usd,
            analysis.health_factor,
            analysis.leverage,
            len(analysis.loops),
        )
        return analysis


def analyze_exposure(positions: Sequence[LendingPosition]) -> Analysis:
    return ExposureAnalyzer().analyze(positions)
