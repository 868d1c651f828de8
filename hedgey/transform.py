"""Pure transforms from raw lending/perp payloads into core records, no I/O."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .errors import SnapshotError
from .models import NEUTRAL, HedgePosition, LendingPosition, LeverageType, direction_of
from .symbols import SymbolNormalizer

RAY = 10**27
SECONDS_PER_YEAR = 31_536_000
HOURS_PER_YEAR = 24 * 365
BPS = 10_000


def _field(raw: Mapping[str, Any], key: str) -> Any:
    if not isinstance(raw, Mapping) or key not in raw:
        raise SnapshotError(f"Missing field '{key}'")
    return raw[key]


def _number(raw: Mapping[str, Any], key: str) -> float:
    value = _field(raw, key)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SnapshotError(f"Field '{key}' is not numeric: {value!r}") from None


def _integer(raw: Mapping[str, Any], key: str) -> int:
    value = _field(raw, key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SnapshotError(f"Field '{key}' is not an integer: {value!r}") from None


def _text(raw: Mapping[str, Any], key: str) -> str:
    value = _field(raw, key)
    if not isinstance(value, str) or not value:
        raise SnapshotError(f"Field '{key}' must be a non-empty string")
    return value


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------


def format_units(raw_amount: int, decimals: int) -> float:
    """Convert integer base units to a token amount.

    Examples:
        format_units(1_500_000, 6) → 1.5
    """
    return raw_amount / (10**decimals)


def ray_to_apr(ray_rate: int) -> float:
    """Convert a per-second ray rate into an annual percentage.

    apr = ray × seconds_per_year × 100 // 10^27 / 100, so 10^20 → 3.15.
    """
    return (int(ray_rate) * SECONDS_PER_YEAR * 100 // RAY) / 100


def annualize_funding(hourly_rate: float) -> float:
    """Hourly perp funding rate → annual percentage."""
    return hourly_rate * HOURS_PER_YEAR * 100


def threshold_to_fraction(value: float) -> float:
    """Liquidation threshold as a fraction; values above 1 are basis points.

    Examples:
        threshold_to_fraction(8250) → 0.825
        threshold_to_fraction(0.825) → 0.825
    """
    return value / BPS if value > 1 else value


def bonus_to_fraction(value: float) -> float:
    """Liquidation bonus as a multiplier; values of 100 or more are basis points.

    Examples:
        bonus_to_fraction(10500) → 1.05
        bonus_to_fraction(1.05) → 1.05
    """
    return value / BPS if value >= 100 else value


def resolve_price(
    symbol: str,
    prices: Mapping[str, float],
    normalizer: SymbolNormalizer,
) -> float:
    """Resolve the USD price for a symbol, falling back to its canonical symbol."""
    price = prices.get(symbol, 0.0) or 0.0
    if price == 0.0:
        canonical = normalizer.normalize(symbol)
        if canonical != symbol:
            price = prices.get(canonical, 0.0) or 0.0
    return float(price)


# ---------------------------------------------------------------------------
# Lending reserves
# ---------------------------------------------------------------------------


def transform_reserve(
    raw: Mapping[str, Any],
    prices: Mapping[str, float],
    chain: str = "",
    normalizer: SymbolNormalizer | None = None,
) -> LendingPosition:
    """Turn one raw user-reserve record into a :class:`LendingPosition`.

    Balances and debts are integer base units, rates are ray values.
    Threshold and bonus may be fractions or basis points.
    """
    normalizer = normalizer or SymbolNormalizer()
    symbol = _text(raw, "symbol")
    decimals = _integer(raw, "decimals")

    supplied = format_units(_integer(raw, "currentATokenBalance"), decimals)
    borrowed = format_units(_integer(raw, "currentVariableDebt"), decimals)
    price = resolve_price(symbol, prices, normalizer)

    return LendingPosition(
        asset=symbol,
        name=str(raw.get("name") or symbol),
        supplied=supplied,
        borrowed=borrowed,
        supplied_usd=supplied * price,
        borrowed_usd=borrowed * price,
        supply_apr=ray_to_apr(_integer(raw, "liquidityRate")),
        borrow_apr=ray_to_apr(_integer(raw, "variableBorrowRate")),
        liquidation_threshold=threshold_to_fraction(_number(raw, "liquidationThreshold")),
        liquidation_bonus=bonus_to_fraction(_number(raw, "liquidationBonus")),
        price=price,
        decimals=decimals,
        chain=chain,
    )


def transform_reserves(
    raw_reserves: Sequence[Mapping[str, Any]],
    prices: Mapping[str, float],
    chain: str = "",
    normalizer: SymbolNormalizer | None = None,
) -> list[LendingPosition]:
    normalizer = normalizer or SymbolNormalizer()
    return [transform_reserve(r, prices, chain, normalizer) for r in raw_reserves]


# ---------------------------------------------------------------------------
# Perp positions
# ---------------------------------------------------------------------------


def parse_funding_rates(meta_and_ctxs: Sequence[Any]) -> dict[str, float]:
    """Map coin → hourly funding from a ``[meta, asset_ctxs]`` pair.

    The i-th context belongs to the i-th coin of ``meta["universe"]``.
    """
    if len(meta_and_ctxs) != 2:
        raise SnapshotError("Funding payload must be a [meta, asset_ctxs] pair")
    meta, ctxs = meta_and_ctxs
    if not isinstance(meta, Mapping):
        raise SnapshotError("Funding meta must be a mapping with a 'universe' list")
    universe = meta.get("universe") or []

    rates: dict[str, float] = {}
    for coin, ctx in zip(universe, ctxs or []):
        if ctx:
            rates[_text(coin, "name")] = _number(ctx, "funding")
    return rates


def transform_perp_position(
    raw: Mapping[str, Any],
    funding_rates: Mapping[str, float],
) -> HedgePosition:
    """Turn one clearinghouse asset-position entry into a :class:`HedgePosition`.

    ``szi`` is signed: positive is long, negative is short.
    """
    pos = raw.get("position") if isinstance(raw, Mapping) else None
    if not isinstance(pos, Mapping):
        raise SnapshotError(f"Asset position has no 'position' object: {raw!r}")

    coin = _text(pos, "coin")
    signed_size = _number(pos, "szi")
    entry_price = _number(pos, "entryPx")
    lev = pos.get("leverage") or {}
    if not isinstance(lev, Mapping):
        lev = {"value": lev}
    leverage_type: LeverageType = "cross" if lev.get("type") == "cross" else "isolated"
    funding = float(funding_rates.get(coin, 0.0))
    size = abs(signed_size)

    return HedgePosition(
        coin=coin,
        size=size,
        side=direction_of(signed_size),
        entry_price=entry_price,
        leverage=_number(lev, "value") if "value" in lev else 0.0,
        leverage_type=leverage_type,
        unrealized_pnl=_number(pos, "unrealizedPnl"),
        notional_value=size * entry_price,
        funding_rate=funding,
        funding_rate_annualized=annualize_funding(funding),
    )


def transform_perp_positions(
    asset_positions: Sequence[Mapping[str, Any]],
    funding_rates: Mapping[str, float],
) -> list[HedgePosition]:
    """Transform all entries, dropping flat (size 0) positions."""
    positions = [transform_perp_position(a, funding_rates) for a in asset_positions]
    return [p for p in positions if p.side != NEUTRAL]
