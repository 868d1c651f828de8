"""Asset symbol normalization: wrapped/staked variants onto canonical symbols."""
from __future__ import annotations

from collections.abc import Mapping

DEFAULT_SYMBOL_ALIASES: dict[str, str] = {
    "WETH": "ETH",
    "wstETH": "ETH",
    "WBTC": "BTC",
}


class SymbolNormalizer:
    """Map wrapped asset symbols onto the symbol the perp venue lists.

    Cross-protocol matching keys on the normalized symbol, so a WETH
    supply and an ETH short land in the same exposure record. Extra aliases
    are merged over ``DEFAULT_SYMBOL_ALIASES``.
    """

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        merged = dict(DEFAULT_SYMBOL_ALIASES)
        if aliases:
            merged.update(aliases)
        self._aliases = merged

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def normalize(self, symbol: str) -> str:
        """Follow aliases until a symbol with no further alias is reached.

        ``{"cbETH": "WETH"}`` resolves cbETH through WETH to ETH. A cycle
        stops at the last symbol before it repeats.
        """
        seen = {symbol}
        while symbol in self._aliases:
            target = self._aliases[symbol]
            if target in seen:
                break
            seen.add(target)
            symbol = target
        return symbol

    def with_aliases(self, extra: Mapping[str, str]) -> SymbolNormalizer:
        """Return a new normalizer with ``extra`` layered on top of this one."""
        merged = dict(self._aliases)
        merged.update(extra)
        return SymbolNormalizer(merged)

    def __repr__(self) -> str:
        return f"SymbolNormalizer({self._aliases!r})"
