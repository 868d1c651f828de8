"""Command-line interface for hedgey."""
from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any

from .analyzers import ExposureAnalyzer, GreeksCalculator, HedgeAnalyzer
from .config import AppConfig, load_config
from .errors import HedgeyError
from .logging_setup import configure_logging
from .report import format_analysis, format_greeks, format_hedge, format_hedge_csv
from .snapshot import load_snapshot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="hedgey",
        description="Lending and perp position risk analytics",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML config (default: hedgey.yaml in the working directory)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    sub = parser.add_subparsers(dest="command")
    for name, help_text in (
        ("check", "Lending exposure, health factor and loops"),
        ("greeks", "Delta, gamma, vega and theta of lending positions"),
        ("hedge", "Lending exposure against perp hedges"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument(
            "snapshot",
            nargs="?",
            default=None,
            help="Position snapshot file (default: 'snapshot' from config)",
        )
        cmd.add_argument("--json", action="store_true", help="Emit JSON instead of text")
        if name == "hedge":
            cmd.add_argument(
                "--csv",
                metavar="PATH",
                default=None,
                help="Also write the hedge report as CSV to PATH",
            )

    return parser


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats so the output is strict JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def _dump(payload: dict[str, Any]) -> str:
    return json.dumps(_json_safe(payload), indent=2)


def _run(args: argparse.Namespace, config: AppConfig) -> str:
    """Execute the selected command and return its rendered output."""
    snapshot_path = args.snapshot or config.snapshot
    if not snapshot_path:
        raise ValueError("No snapshot file given and none configured")

    normalizer = config.normalizer()
    snapshot = load_snapshot(snapshot_path, normalizer)

    if args.command == "hedge":
        hedge = HedgeAnalyzer(normalizer, config.analysis.effectiveness).analyze(
            snapshot.lending, snapshot.hedges, snapshot.prices
        )
        if args.csv:
            Path(args.csv).write_text(format_hedge_csv(hedge, config.analysis.effectiveness))
            logger.info("Wrote hedge CSV to %s", args.csv)
        return _dump(hedge.to_dict()) if args.json else format_hedge(hedge)

    analysis = ExposureAnalyzer().analyze(snapshot.lending)
    if args.command == "check":
        return _dump(analysis.to_dict()) if args.json else format_analysis(analysis)

    greeks = GreeksCalculator(config.analysis.rate_shock).calculate(snapshot.lending, analysis)
    if args.json:
        return _dump({"analysis": analysis.to_dict(), "greeks": greeks.to_dict()})
    return format_analysis(analysis) + "\n\n" + format_greeks(greeks)


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    try:
        config = load_config(args.config)
        output = _run(args, config)
    except (HedgeyError, OSError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

    print(output)
