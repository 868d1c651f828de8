"""Unit tests for data models."""
from __future__ import annotations

import pytest

from hedgey.models import (
    AssetExposure,
    HedgeLeg,
    LendingPosition,
    LoopPosition,
    direction_of,
)


class TestDirectionOf:
    def test_signs(self) -> None:
        assert direction_of(1.5) == "LONG"
        assert direction_of(-0.1) == "SHORT"
        assert direction_of(0.0) == "NEUTRAL"


class TestLendingPosition:
    def test_net_usd(self, make_lending) -> None:
        p = make_lending("WETH", supplied=2.0, borrowed=0.5, price=2000.0)
        assert p.net_usd == pytest.approx(3000.0)

    def test_frozen(self, make_lending) -> None:
        p: LendingPosition = make_lending("WETH", supplied=1.0)
        with pytest.raises(AttributeError):
            p.supplied = 2.0  # type: ignore[misc]

    def test_default_chain(self, make_lending) -> None:
        assert make_lending("WETH").chain == ""


class TestHedgePosition:
    def test_is_open(self, make_hedge) -> None:
        assert make_hedge("ETH", 1.0, "SHORT").is_open
        assert not make_hedge("ETH", 0.0, "SHORT").is_open
        assert not make_hedge("ETH", 1.0, "NEUTRAL").is_open


class TestHedgeLeg:
    def test_empty(self) -> None:
        leg = HedgeLeg.empty()
        assert leg.side == "NEUTRAL"
        assert leg.size == 0.0
        assert leg.size_usd == 0.0
        assert leg.leverage == 0.0

    def test_signed_sizes(self) -> None:
        short = HedgeLeg(2.0, 4000.0, "SHORT", 3.0, 0.0, 0.0, 0.0)
        long = HedgeLeg(2.0, 4000.0, "LONG", 3.0, 0.0, 0.0, 0.0)
        assert short.signed_size == -2.0
        assert short.signed_size_usd == -4000.0
        assert long.signed_size == 2.0
        assert long.signed_size_usd == 4000.0
        assert HedgeLeg.empty().signed_size == 0.0


class TestRecords:
    def test_equality(self) -> None:
        a = LoopPosition(asset="WETH", supplied=10.0, borrowed=5.0, effective_leverage=2.0)
        b = LoopPosition(asset="WETH", supplied=10.0, borrowed=5.0, effective_leverage=2.0)
        assert a == b

    def test_to_dict(self) -> None:
        e = AssetExposure(1.0, 0.0, 2000.0, 0.0, 1.0, 2000.0, "LONG")
        assert e.to_dict() == {
            "supplied": 1.0,
            "borrowed": 0.0,
            "supplied_usd": 2000.0,
            "borrowed_usd": 0.0,
            "net": 1.0,
            "net_usd": 2000.0,
            "direction": "LONG",
        }
