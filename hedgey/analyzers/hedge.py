"""Cross-protocol hedge analysis: lending exposure against perp positions."""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from ..models import (
    LONG,
    SHORT,
    CombinedExposure,
    Direction,
    EffectivenessThresholds,
    HedgeAnalysis,
    HedgeEffectiveness,
    HedgeLeg,
    HedgePosition,
    HedgeTotals,
    LendingLeg,
    LendingPosition,
    NetExposure,
    direction_of,
)
from ..symbols import SymbolNormalizer

logger = logging.getLogger(__name__)


def calc_hedge_ratio(lending_usd: float, hedge_usd: float, hedge_side: Direction) -> float:
    """Percent of a lending exposure offset by an opposing perp leg.

    Only opposing legs count as a hedge; same-direction legs amplify and
    score 0. The ratio is not capped, values above 100 mean over-hedged.
    """
    if lending_usd == 0:
        return 0.0
    lending_side = LONG if lending_usd > 0 else SHORT
    if (lending_side, hedge_side) in ((LONG, SHORT), (SHORT, LONG)):
        return (hedge_usd / abs(lending_usd)) * 100
    return 0.0


def effective_funding_apy(position: HedgePosition) -> float:
    """Annualized funding from the holder's side: shorts receive, longs pay."""
    if position.side == SHORT:
        return position.funding_rate_annualized
    return -position.funding_rate_annualized


class HedgeAnalyzer:
    """Combine lending and perp positions into a :class:`HedgeAnalysis`."""

    def __init__(
        self,
        normalizer: SymbolNormalizer | None = None,
        thresholds: EffectivenessThresholds | None = None,
    ) -> None:
        self._normalizer = normalizer or SymbolNormalizer()
        self._thresholds = thresholds or EffectivenessThresholds()

    # ------------------------------------------------------------------
    # Per-asset legs
    # ------------------------------------------------------------------

    def _all_assets(
        self,
        lending: Sequence[LendingPosition],
        hedges: Sequence[HedgePosition],
    ) -> list[str]:
        # dict keeps first-seen order: lending rows, then hedge-only coins
        seen: dict[str, None] = {}
        for p in lending:
            seen.setdefault(self._normalizer.normalize(p.asset), None)
        for h in hedges:
            seen.setdefault(self._normalizer.normalize(h.coin), None)
        return list(seen)

    def _lending_leg(self, asset: str, lending: Sequence[LendingPosition]) -> LendingLeg:
        net = 0.0
        net_usd = 0.0
        for p in lending:
            if self._normalizer.normalize(p.asset) == asset:
                net += p.supplied - p.borrowed
                net_usd += p.supplied_usd - p.borrowed_usd
        return LendingLeg(net=net, net_usd=net_usd, direction=direction_of(net))

    def _hedge_leg(self, asset: str, hedges: Sequence[HedgePosition]) -> HedgeLeg:
        for h in hedges:
            if self._normalizer.normalize(h.coin) == asset:
                return HedgeLeg(
                    size=h.size,
                    size_usd=h.notional_value,
                    side=h.side,
                    leverage=h.leverage,
                    unrealized_pnl=h.unrealized_pnl,
                    funding_rate=h.funding_rate,
                    funding_rate_annualized=h.funding_rate_annualized,
                )
        return HedgeLeg.empty()

    def _combine(
        self,
        asset: str,
        lending: Sequence[LendingPosition],
        hedges: Sequence[HedgePosition],
        prices: Mapping[str, float],
    ) -> CombinedExposure:
        lending_leg = self._lending_leg(asset, lending)
        hedge_leg = self._hedge_leg(asset, hedges)

        net_amount = lending_leg.net + hedge_leg.signed_size
        net_usd = lending_leg.net_usd + hedge_leg.signed_size_usd
        ratio = calc_hedge_ratio(lending_leg.net_usd, hedge_leg.size_usd, hedge_leg.side)

        logger.debug(
            "%s: lending %.4f ($%.2f) %s · perp %.4f ($%.2f) %s · ratio %.1f%%",
            asset,
            lending_leg.net,
            lending_leg.net_usd,
            lending_leg.direction,
            hedge_leg.size,
            hedge_leg.size_usd,
            hedge_leg.side,
            ratio,
        )

        return CombinedExposure(
            asset=asset,
            aave_exposure=lending_leg,
            hyperliquid_exposure=hedge_leg,
            net_exposure=NetExposure(
                amount=net_amount,
                amount_usd=net_usd,
                direction=direction_of(net_amount),
            ),
            hedge_ratio=ratio,
            price=float(prices.get(asset, 0.0) or 0.0),
        )

    # ------------------------------------------------------------------
    # Portfolio level
    # ------------------------------------------------------------------

    @staticmethod
    def _totals(
        by_asset: dict[str, CombinedExposure],
        lending: Sequence[LendingPosition],
        hedges: Sequence[HedgePosition],
    ) -> HedgeTotals:
        aave_total = sum(abs(e.aave_exposure.net_usd) for e in by_asset.values())
        perp_total = sum(abs(e.hyperliquid_exposure.size_usd) for e in by_asset.values())
        # signed on purpose: keeps the portfolio's directional bias
        net_exposure = sum(e.net_exposure.amount_usd for e in by_asset.values())

        equity = sum(p.supplied_usd for p in lending) - sum(p.borrowed_usd for p in lending)
        margin = sum(h.notional_value / h.leverage for h in hedges if h.leverage > 0)
        overall = (perp_total / aave_total) * 100 if aave_total > 0 else 0.0

        return HedgeTotals(
            aave_total_usd=aave_total,
            aave_equity_usd=equity,
            hyperliquid_total_usd=perp_total,
            hyperliquid_margin_usd=margin,
            total_capital_usd=equity + margin,
            net_exposure_usd=net_exposure,
            overall_hedge_ratio=overall,
        )

    def _effectiveness(self, by_asset: dict[str, CombinedExposure]) -> HedgeEffectiveness:
        bands = self._thresholds
        perfect: list[str] = []
        partial: list[str] = []
        unhedged: list[str] = []
        over: list[str] = []

        for asset, exposure in by_asset.items():
            if exposure.aave_exposure.net_usd == 0:
                continue
            ratio = exposure.hedge_ratio
            if bands.perfect_min <= ratio <= bands.perfect_max:
                perfect.append(asset)
            elif ratio > bands.perfect_max:
                over.append(asset)
            elif ratio > bands.partial_min:
                partial.append(asset)
            else:
                unhedged.append(asset)

        return HedgeEffectiveness(
            perfectly_hedged=tuple(perfect),
            partially_hedged=tuple(partial),
            unhedged=tuple(unhedged),
            over_hedged=tuple(over),
        )

    @staticmethod
    def _aave_net_apy(lending: Sequence[LendingPosition]) -> float:
        supplied = sum(p.supplied_usd for p in lending)
        borrowed = sum(p.borrowed_usd for p in lending)
        if supplied == 0 and borrowed == 0:
            return 0.0
        equity = supplied - borrowed
        if equity <= 0:
            return 0.0
        weighted = sum(p.supplied_usd * p.supply_apr - p.borrowed_usd * p.borrow_apr for p in lending)
        return weighted / equity

    @staticmethod
    def _funding_apy(hedges: Sequence[HedgePosition]) -> float:
        notional = sum(h.notional_value for h in hedges)
        if notional == 0:
            return 0.0
        weighted = sum(h.notional_value * effective_funding_apy(h) for h in hedges)
        return weighted / notional

    @staticmethod
    def _combined_apy(
        totals: HedgeTotals,
        aave_net_apy: float,
        hedges: Sequence[HedgePosition],
    ) -> float:
        """Yield on all capital deployed: lending equity plus posted perp margin."""
        if totals.total_capital_usd <= 0:
            return 0.0
        funding = sum(h.notional_value * effective_funding_apy(h) for h in hedges)
        return (totals.aave_equity_usd * aave_net_apy + funding) / totals.total_capital_usd

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(
        self,
        lending: Sequence[LendingPosition],
        hedges: Sequence[HedgePosition],
        prices: Mapping[str, float],
    ) -> HedgeAnalysis:
        open_hedges = [h for h in hedges if h.is_open]

        by_asset = {
            asset: self._combine(asset, lending, open_hedges, prices)
            for asset in self._all_assets(lending, open_hedges)
        }
        totals = self._totals(by_asset, lending, open_hedges)
        aave_apy = self._aave_net_apy(lending)

        analysis = HedgeAnalysis(
            by_asset=by_asset,
            totals=totals,
            aave_net_apy=aave_apy,
            hyperliquid_funding_apy=self._funding_apy(open_hedges),
            combined_net_apy=self._combined_apy(totals, aave_apy, open_hedges),
            effectiveness=self._effectiveness(by_asset),
        )
        logger.info(
            "Hedge analysis: %d assets · Lending: $%.2f  Perp: $%.2f  Net: $%.2f  Ratio: %.1f%%",
            len(by_asset),
            totals.aave_total_usd,
            totals.hyperliquid_total_usd,
            totals.net_exposure_usd,
            totals.overall_hedge_ratio,
        )
        return analysis


def analyze_hedge(
    lending: Sequence[LendingPosition],
    hedges: Sequence[HedgePosition],
    prices: Mapping[str, float],
    normalizer: SymbolNormalizer | None = None,
    thresholds: EffectivenessThresholds | None = None,
) -> HedgeAnalysis:
    return HedgeAnalyzer(normalizer, thresholds).analyze(lending, hedges, prices)
