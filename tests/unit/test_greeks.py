"""Unit tests for the greeks calculator."""
from __future__ import annotations

import pytest

from hedgey.analyzers.exposure import analyze_exposure
from hedgey.analyzers.greeks import (
    GreeksCalculator,
    calc_delta,
    calc_theta,
    calc_vega,
    calculate_greeks,
)
from hedgey.models import LendingPosition


class TestDelta:
    def test_sample_book(self, sample_lending: list[LendingPosition]) -> None:
        delta = calc_delta(sample_lending)
        assert delta.total_delta_usd == pytest.approx(12000.0)
        assert delta.by_asset["WETH"].net == pytest.approx(10.0)
        assert delta.by_asset["WETH"].delta_usd == pytest.approx(20000.0)
        assert delta.by_asset["USDC"].delta_usd == pytest.approx(-8000.0)

    def test_rows_summed_per_raw_symbol(self, make_lending) -> None:
        delta = calc_delta(
            [
                make_lending("WETH", supplied=1.0, price=2000.0),
                make_lending("WETH", borrowed=0.25, price=2000.0),
                make_lending("ETH", supplied=1.0, price=2000.0),
            ]
        )
        assert set(delta.by_asset) == {"WETH", "ETH"}
        assert delta.by_asset["WETH"].net == pytest.approx(0.75)
        assert delta.total_delta_usd == pytest.approx(3500.0)

    def test_empty(self) -> None:
        delta = calc_delta([])
        assert delta.total_delta_usd == 0
        assert delta.by_asset == {}


class TestVega:
    def test_one_point_shock(self, sample_lending: list[LendingPosition]) -> None:
        vega = calc_vega(sample_lending)
        assert vega.rate_impact_yearly == pytest.approx(80.0)
        assert vega.rate_impact_monthly == pytest.approx(80.0 / 12)

    def test_custom_shock(self, sample_lending: list[LendingPosition]) -> None:
        assert calc_vega(sample_lending, 0.02).rate_impact_yearly == pytest.approx(160.0)

    def test_no_debt(self, make_lending) -> None:
        vega = calc_vega([make_lending("WETH", supplied=1.0, price=2000.0)])
        assert vega.rate_impact_yearly == 0.0
        assert vega.rate_impact_monthly == 0.0


class TestTheta:
    def test_sample_book(self, sample_lending: list[LendingPosition]) -> None:
        theta = calc_theta(sample_lending)
        # (20000×2 − 8000×4.5) / 365 / 100
        daily = 4000 / 365 / 100
        assert theta.daily_net == pytest.approx(daily)
        assert theta.monthly_net == pytest.approx(daily * 30)
        assert theta.yearly_net == pytest.approx(40.0)

    def test_negative_carry(self, make_lending) -> None:
        theta = calc_theta([make_lending("USDC", borrowed=3650.0, borrow_apr=10.0)])
        assert theta.daily_net == pytest.approx(-1.0)


class TestGreeksCalculator:
    def test_gamma_is_leverage_passthrough(self, sample_lending: list[LendingPosition]) -> None:
        analysis = analyze_exposure(sample_lending)
        greeks = calculate_greeks(sample_lending, analysis)
        assert greeks.gamma.leverage == analysis.leverage

    def test_gamma_degenerate_leverage(self, make_lending) -> None:
        positions = [make_lending("DAI", supplied=5.0, borrowed=5.0)]
        analysis = analyze_exposure(positions)
        assert GreeksCalculator().calculate(positions, analysis).gamma.leverage == 1.0

    def test_rate_shock_configurable(self, sample_lending: list[LendingPosition]) -> None:
        analysis = analyze_exposure(sample_lending)
        greeks = GreeksCalculator(rate_shock=0.005).calculate(sample_lending, analysis)
        assert greeks.vega.rate_impact_yearly == pytest.approx(40.0)

    def test_to_dict(self, sample_lending: list[LendingPosition]) -> None:
        greeks = calculate_greeks(sample_lending, analyze_exposure(sample_lending))
        data = greeks.to_dict()
        assert set(data) == {"delta", "gamma", "vega", "theta"}
        assert data["delta"]["by_asset"]["USDC"]["net"] == pytest.approx(-8000.0)
