"""Snapshot loader: reads position payloads saved to a YAML/JSON file."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from . import transform
from .errors import SnapshotError
from .models import NEUTRAL, HedgePosition, LendingPosition, direction_of
from .symbols import SymbolNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Already-priced inputs for one analysis run."""

    lending: tuple[LendingPosition, ...] = ()
    hedges: tuple[HedgePosition, ...] = ()
    prices: dict[str, float] = field(default_factory=dict)
    chain: str = ""


_LENDING_DEFAULTS: dict[str, Any] = {
    "name": "",
    "liquidation_bonus": 0.0,
    "decimals": 18,
    "chain": "",
}


def _build_lending(raw: dict[str, Any], chain: str) -> LendingPosition:
    """Build a record from normalized fields; USD values default to amount × price."""
    if not isinstance(raw, dict):
        raise SnapshotError(f"Lending entry must be a mapping: {raw!r}")
    values = dict(_LENDING_DEFAULTS, chain=chain)
    values.update(raw)
    try:
        price = float(values["price"])
        supplied = float(values.get("supplied", 0.0))
        borrowed = float(values.get("borrowed", 0.0))
        values.setdefault("supplied_usd", supplied * price)
        values.setdefault("borrowed_usd", borrowed * price)
        return LendingPosition(
            asset=str(values["asset"]),
            name=str(values["name"] or values["asset"]),
            supplied=supplied,
            borrowed=borrowed,
            supplied_usd=float(values["supplied_usd"]),
            borrowed_usd=float(values["borrowed_usd"]),
            supply_apr=float(values.get("supply_apr", 0.0)),
            borrow_apr=float(values.get("borrow_apr", 0.0)),
            liquidation_threshold=float(values["liquidation_threshold"]),
            liquidation_bonus=float(values["liquidation_bonus"]),
            price=price,
            decimals=int(values["decimals"]),
            chain=str(values["chain"]),
        )
    except KeyError as e:
        raise SnapshotError(f"Lending entry missing field {e}: {raw!r}") from None
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid lending entry {raw!r}: {e}") from None


def _build_hedge(raw: dict[str, Any]) -> HedgePosition:
    """Build a record from normalized fields.

    ``side`` may be omitted when ``size`` is signed; notional defaults to
    size × entry price and annualized funding to the hourly rate annualized.
    """
    if not isinstance(raw, dict):
        raise SnapshotError(f"Hedge entry must be a mapping: {raw!r}")
    try:
        signed_size = float(raw["size"])
        side = str(raw.get("side") or direction_of(signed_size)).upper()
        if side not in ("LONG", "SHORT", NEUTRAL):
            raise SnapshotError(f"Unknown side '{side}' for {raw.get('coin')}")
        size = abs(signed_size)
        entry_price = float(raw["entry_price"])
        funding = float(raw.get("funding_rate", 0.0))
        leverage_type = "cross" if raw.get("leverage_type") == "cross" else "isolated"
        return HedgePosition(
            coin=str(raw["coin"]),
            size=size,
            side=side,  # type: ignore[arg-type]
            entry_price=entry_price,
            leverage=float(raw.get("leverage", 1.0)),
            leverage_type=leverage_type,
            unrealized_pnl=float(raw.get("unrealized_pnl", 0.0)),
            notional_value=float(raw.get("notional_value", size * entry_price)),
            funding_rate=funding,
            funding_rate_annualized=float(
                raw.get("funding_rate_annualized", transform.annualize_funding(funding))
            ),
        )
    except KeyError as e:
        raise SnapshotError(f"Hedge entry missing field {e}: {raw!r}") from None
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid hedge entry {raw!r}: {e}") from None


def _as_list(raw: dict[str, Any], key: str) -> list[Any]:
    value = raw.get(key) or []
    if not isinstance(value, list):
        raise SnapshotError(f"'{key}' must be a list")
    return value


def parse_snapshot(
    raw: dict[str, Any],
    normalizer: SymbolNormalizer | None = None,
) -> Snapshot:
    """Build a :class:`Snapshot` from a decoded payload.

    Lending data comes from ``lending`` (normalized records) and/or
    ``reserves`` (raw reserve data); perp data from ``hedges`` and/or
    ``asset_positions`` with ``funding``.
    """
    if not isinstance(raw, dict):
        raise SnapshotError("Snapshot must be a mapping")
    normalizer = normalizer or SymbolNormalizer()

    prices_raw = raw.get("prices") or {}
    if not isinstance(prices_raw, dict):
        raise SnapshotError("'prices' must be a mapping of symbol to USD price")
    try:
        prices = {str(k): float(v) for k, v in prices_raw.items()}
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid price: {e}") from None
    chain = str(raw.get("chain") or "")

    lending = [_build_lending(e, chain) for e in _as_list(raw, "lending")]
    lending += transform.transform_reserves(
        _as_list(raw, "reserves"), prices, chain, normalizer
    )

    hedges = [_build_hedge(e) for e in _as_list(raw, "hedges")]
    funding_raw = raw.get("funding") or {}
    if isinstance(funding_raw, list):
        funding = transform.parse_funding_rates(funding_raw)
    elif isinstance(funding_raw, dict):
        try:
            funding = {str(k): float(v) for k, v in funding_raw.items()}
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"Invalid funding rate: {e}") from None
    else:
        raise SnapshotError("'funding' must be a mapping or a [meta, asset_ctxs] pair")
    hedges += transform.transform_perp_positions(_as_list(raw, "asset_positions"), funding)

    return Snapshot(
        lending=tuple(lending),
        hedges=tuple(hedges),
        prices=prices,
        chain=chain,
    )


def load_snapshot(
    path: str | Path,
    normalizer: SymbolNormalizer | None = None,
) -> Snapshot:
    """Load a snapshot file. JSON files are read with the YAML loader."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SnapshotError(f"Cannot parse {path}: {e}") from e

    snapshot = parse_snapshot(raw or {}, normalizer)
    logger.info(
        "Loaded %d lending and %d perp positions from %s",
        len(snapshot.lending),
        len(snapshot.hedges),
        path,
    )
    return snapshot
