"""Plain-text rendering of analysis results."""
from __future__ import annotations

import csv
import io
import math
from datetime import datetime, timezone

from .models import Analysis, EffectivenessThresholds, Greeks, HedgeAnalysis


def _ratio(value: float) -> str:
    """Format ratios that may be infinite (health factor, loop leverage)."""
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    if math.isnan(value):
        return "n/a"
    return f"{value:.2f}"


def _usd(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _health_status(health_factor: float) -> str:
    if health_factor < 1.0:
        return "🚨 LIQUIDATABLE"
    if health_factor < 1.5:
        return "⚠️ At risk"
    return "✅ Healthy"


def format_analysis(analysis: Analysis) -> str:
    lines = [
        "📊 Lending Exposure",
        "",
        _health_status(analysis.health_factor),
        "",
        f"Supplied: {_usd(analysis.total_supplied_usd)}",
        f"Borrowed: {_usd(analysis.total_borrowed_usd)}",
        f"Net Value: {_usd(analysis.net_value_usd)}",
        f"HF: {_ratio(analysis.health_factor)} · Leverage: {_ratio(analysis.leverage)}x",
        f"Utilization: {analysis.utilization_rate:.2f}% · Net APY: {analysis.net_apy:.2f}%",
    ]

    if analysis.by_asset:
        lines += ["", "By asset:"]
        for asset, exp in analysis.by_asset.items():
            lines.append(
                f"  {asset}: {exp.net:,.4f} ({_usd(exp.net_usd)}) {exp.direction}"
            )

    if analysis.loops:
        lines += ["", "Loops:"]
        for loop in analysis.loops:
            lines.append(
                f"  {loop.asset}: {loop.supplied:,.4f} supplied / "
                f"{loop.borrowed:,.4f} borrowed · {_ratio(loop.effective_leverage)}x"
            )

    return "\n".join(lines)


def format_greeks(greeks: Greeks) -> str:
    lines = [
        "📐 Position Greeks",
        "",
        f"Delta: {_usd(greeks.delta.total_delta_usd)}",
    ]
    for asset, d in greeks.delta.by_asset.items():
        lines.append(f"  {asset}: {d.net:,.4f} → {_usd(d.delta_usd)}")
    lines += [
        f"Gamma (leverage): {_ratio(greeks.gamma.leverage)}x",
        f"Vega (+1% borrow rate): {_usd(greeks.vega.rate_impact_monthly)}/mo · "
        f"{_usd(greeks.vega.rate_impact_yearly)}/yr",
        f"Theta (net carry): {_usd(greeks.theta.daily_net)}/day · "
        f"{_usd(greeks.theta.monthly_net)}/mo · {_usd(greeks.theta.yearly_net)}/yr",
    ]
    return "\n".join(lines)


def format_hedge(analysis: HedgeAnalysis) -> str:
    totals = analysis.totals
    lines = ["🦔 Hedge Analysis", ""]

    for asset, exp in analysis.by_asset.items():
        lend = exp.aave_exposure
        perp = exp.hyperliquid_exposure
        net = exp.net_exposure
        lines.append(
            f"{asset} @ {_usd(exp.price)}\n"
            f"  Lending: {lend.net:,.4f} ({_usd(lend.net_usd)}) {lend.direction}\n"
            f"  Perp: {perp.size:,.4f} ({_usd(perp.size_usd)}) {perp.side}"
            f" · funding {perp.funding_rate_annualized:.2f}%\n"
            f"  Net: {net.amount:,.4f} ({_usd(net.amount_usd)}) {net.direction}"
            f" · Hedge ratio {exp.hedge_ratio:.1f}%"
        )

    eff = analysis.effectiveness
    lines += [
        "",
        f"Lending exposure: {_usd(totals.aave_total_usd)} · Perp exposure: {_usd(totals.hyperliquid_total_usd)}",
        f"Net exposure: {_usd(totals.net_exposure_usd)} · Overall hedge ratio: {totals.overall_hedge_ratio:.1f}%",
        f"Capital: {_usd(totals.total_capital_usd)} "
        f"(equity {_usd(totals.aave_equity_usd)} + margin {_usd(totals.hyperliquid_margin_usd)})",
        "",
        f"Lending APY: {analysis.aave_net_apy:.2f}% · Funding APY: {analysis.hyperliquid_funding_apy:.2f}%"
        f" · Combined: {analysis.combined_net_apy:.2f}%",
        "",
        f"Perfectly hedged: {', '.join(eff.perfectly_hedged) or '—'}",
        f"Partially hedged: {', '.join(eff.partially_hedged) or '—'}",
        f"Over-hedged: {', '.join(eff.over_hedged) or '—'}",
        f"Unhedged: {', '.join(eff.unhedged) or '—'}",
    ]
    return "\n".join(lines)


def _band(low: float, high: float | None = None) -> str:
    if high is None:
        return f"{low:g}"
    return f"{low:g}-{high:g}"


def format_hedge_csv(
    analysis: HedgeAnalysis,
    thresholds: EffectivenessThresholds | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Render a hedge analysis as CSV sections.

    Sections: per-asset positions (assets flat on both legs are skipped),
    portfolio totals, APY breakdown and effectiveness buckets.
    """
    bands = thresholds or EffectivenessThresholds()
    generated_at = generated_at or datetime.now(timezone.utc)
    totals = analysis.totals
    eff = analysis.effectiveness

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    writer.writerow(["HEDGE ANALYSIS - POSITIONS"])
    writer.writerow([
        "Asset", "Lending Amount", "Lending USD", "Lending Direction",
        "Perp Amount", "Perp USD", "Perp Side", "Perp Leverage", "Perp Funding APY",
        "Net Amount", "Net USD", "Net Direction", "Hedge Ratio %",
    ])
    for asset, exp in analysis.by_asset.items():
        lend = exp.aave_exposure
        perp = exp.hyperliquid_exposure
        net = exp.net_exposure
        if lend.net_usd == 0 and perp.size_usd == 0:
            continue
        writer.writerow([
            asset,
            f"{lend.net:.6f}", f"{lend.net_usd:.2f}", lend.direction,
            f"{perp.size:.6f}", f"{perp.size_usd:.2f}", perp.side,
            f"{perp.leverage:.1f}", f"{perp.funding_rate_annualized:.2f}",
            f"{net.amount:.6f}", f"{net.amount_usd:.2f}", net.direction,
            f"{exp.hedge_ratio:.2f}",
        ])

    writer.writerow([])
    writer.writerow(["PORTFOLIO TOTALS"])
    writer.writerow(["Metric", "Value"])
    writer.writerows([
        ["Lending Exposure USD", f"{totals.aave_total_usd:.2f}"],
        ["Lending Equity USD", f"{totals.aave_equity_usd:.2f}"],
        ["Perp Notional USD", f"{totals.hyperliquid_total_usd:.2f}"],
        ["Perp Margin USD", f"{totals.hyperliquid_margin_usd:.2f}"],
        ["Total Capital USD", f"{totals.total_capital_usd:.2f}"],
        ["Net Exposure USD", f"{totals.net_exposure_usd:.2f}"],
        ["Overall Hedge Ratio %", f"{totals.overall_hedge_ratio:.2f}"],
    ])

    writer.writerow([])
    writer.writerow(["APY BREAKDOWN"])
    writer.writerow(["Metric", "Value %"])
    writer.writerows([
        ["Lending Net APY", f"{analysis.aave_net_apy:.2f}"],
        ["Perp Funding APY", f"{analysis.hyperliquid_funding_apy:.2f}"],
        ["Combined Net APY", f"{analysis.combined_net_apy:.2f}"],
    ])

    writer.writerow([])
    writer.writerow(["HEDGE EFFECTIVENESS"])
    writer.writerow(["Category", "Assets"])
    for label, assets in (
        (f"Perfectly Hedged ({_band(bands.perfect_min, bands.perfect_max)}%)", eff.perfectly_hedged),
        (f"Partially Hedged ({_band(bands.partial_min, bands.perfect_min)}%)", eff.partially_hedged),
        (f"Unhedged (<{_band(bands.partial_min)}%)", eff.unhedged),
        (f"Over-Hedged (>{_band(bands.perfect_max)}%)", eff.over_hedged),
    ):
        if assets:
            writer.writerow([label, "; ".join(assets)])

    writer.writerow([])
    writer.writerow([f"Generated at: {generated_at.isoformat()}"])
    return buf.getvalue()
