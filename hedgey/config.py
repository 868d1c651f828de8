"""Configuration loader: reads hedgey.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import EffectivenessThresholds
from .symbols import SymbolNormalizer

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "hedgey.yaml"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisConfig:
    rate_shock: float = 0.01
    effectiveness: EffectivenessThresholds = field(
        default_factory=EffectivenessThresholds
    )


@dataclass(frozen=True)
class SymbolsConfig:
    aliases: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AppConfig:
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    symbols: SymbolsConfig = field(default_factory=SymbolsConfig)
    snapshot: str = ""

    def normalizer(self) -> SymbolNormalizer:
        return SymbolNormalizer(self.symbols.aliases)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_effectiveness(raw: dict[str, Any]) -> EffectivenessThresholds:
    return EffectivenessThresholds(
        perfect_min=float(raw.get("perfect_min", 95.0)),
        perfect_max=float(raw.get("perfect_max", 105.0)),
        partial_min=float(raw.get("partial_min", 20.0)),
    )


def _build_analysis(raw: dict[str, Any]) -> AnalysisConfig:
    return AnalysisConfig(
        rate_shock=float(raw.get("rate_shock", 0.01)),
        effectiveness=_build_effectiveness(raw.get("effectiveness") or {}),
    )


def _build_symbols(raw: dict[str, Any]) -> SymbolsConfig:
    aliases = raw.get("aliases") or {}
    return SymbolsConfig(aliases={str(k): str(v) for k, v in aliases.items()})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to a YAML config file. Defaults to ``hedgey.yaml``
            in the working directory; when that default file does not exist
            the built-in defaults are used.
    """
    load_dotenv()

    if config_path is None:
        default_path = Path.cwd() / DEFAULT_CONFIG_NAME
        if not default_path.exists():
            logger.debug("No %s found, using defaults", DEFAULT_CONFIG_NAME)
            return AppConfig()
        config_path = default_path
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        analysis=_build_analysis(raw.get("analysis") or {}),
        symbols=_build_symbols(raw.get("symbols") or {}),
        snapshot=str(raw.get("snapshot") or ""),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.analysis.rate_shock < 0:
        raise ValueError("analysis.rate_shock must not be negative")

    bands = cfg.analysis.effectiveness
    if bands.perfect_min > bands.perfect_max:
        raise ValueError(
            f"perfect_min ({bands.perfect_min}) exceeds perfect_max ({bands.perfect_max})"
        )
    if bands.partial_min >= bands.perfect_min:
        raise ValueError(
            f"partial_min ({bands.partial_min}) must be below perfect_min ({bands.perfect_min})"
        )

    for symbol, target in cfg.symbols.aliases.items():
        if not target:
            raise ValueError(f"Symbol alias '{symbol}' has no target")

    aliases = cfg.normalizer().aliases
    for symbol in aliases:
        chain = [symbol]
        while chain[-1] in aliases and aliases[chain[-1]] != chain[-1]:
            target = aliases[chain[-1]]
            if target in chain:
                raise ValueError(
                    f"Symbol aliases form a cycle: {' -> '.join(chain + [target])}"
                )
            chain.append(target)
