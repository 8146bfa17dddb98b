# cao_model/cli.py
# Command-line interface entry point (argparse)
"""
Run wage lookups and timeline assembly from the shell and print JSON.

    python -m cao_model.cli forward --scale 6 --step 10 --date 2025-03-01
    python -m cao_model.cli reverse --salary 2877 --date 2025-03-01
    python -m cao_model.cli scales --all
    python -m cao_model.cli timeline --records person.yaml --entity-id emp-1

Exit codes: 0 ok, 1 configuration or unexpected error, 2 invalid input,
3 date outside the known wage data.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

import yaml

from cao_model.config.loaders import load_settings
from cao_model.exceptions import ConfigError, InputError, OutOfRangeError
from cao_model.normalization.normalizer import normalize_history_rows
from cao_model.pay import calculate_gross_monthly
from cao_model.projection import project_progression
from cao_model.resolution.resolver import WageResolver
from cao_model.timeline.assembler import build_timeline
from cao_model.utils.date_utils import today
from cao_model.wage_scales.provider import WageTableProvider, loader_from_path

from logging_config import setup_logging, shutdown_logging

logger = logging.getLogger(__name__)

LOG_DIR = Path("output_dev/cao_logs")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INPUT = 2
EXIT_OUT_OF_RANGE = 3


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cao-model", description="CAO wage-scale lookups and employment timelines."
    )
    parser.add_argument(
        "--wage-table",
        type=str,
        default=None,
        help="YAML or Parquet wage table (default: $CAO_MODEL_WAGE_TABLE or built-in table)",
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Engine settings YAML (default: $CAO_MODEL_SETTINGS or built-in defaults)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("forward", help="Wage of a scale/step on a date")
    p.add_argument("--scale", type=int, required=True)
    p.add_argument("--step", type=int, required=True)
    p.add_argument("--date", type=str, required=True)

    p = sub.add_parser("reverse", help="Most likely scale/step for a salary")
    p.add_argument("--salary", type=str, required=True)
    p.add_argument("--date", type=str, required=True)
    p.add_argument("--hint", type=str, default=None, help="Scale category to prefer")

    p = sub.add_parser("progression", help="Wage history and next scheduled raise")
    p.add_argument("--scale", type=int, required=True)
    p.add_argument("--step", type=int, required=True)
    p.add_argument("--date", type=str, default=None, help="Reference date (default: today)")

    p = sub.add_parser("steps", help="Steps of a scale with a rate on a date")
    p.add_argument("--scale", type=int, required=True)
    p.add_argument("--date", type=str, required=True)

    p = sub.add_parser("gross", help="Part-time gross monthly wage")
    p.add_argument("--monthly", type=str, required=True, help="Full-time monthly wage")
    p.add_argument("--hours", type=str, required=True, help="Contract hours per week")

    p = sub.add_parser("scales", help="Wage scale definitions")
    p.add_argument("--all", action="store_true", help="Include inactive scales")

    p = sub.add_parser("timeline", help="Employment timeline from raw records")
    p.add_argument("--records", type=str, required=True, help="YAML/JSON list of records")
    p.add_argument("--entity-id", type=str, required=True)
    p.add_argument("--history", type=str, default=None, help="YAML/JSON list of history rows")
    p.add_argument("--now", type=str, default=None, help="Evaluation date (default: today)")

    return parser


def _load_rows(path: str) -> List[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise InputError(f"Could not read {path}: {e}") from e
    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise InputError(f"{path} must contain a list of objects")
    return data


def run_command(args: argparse.Namespace) -> Any:
    """Execute the parsed command and return a JSON-serializable result."""
    settings = load_settings(args.settings)
    provider = WageTableProvider(
        loader_from_path(args.wage_table),
        refresh_interval_seconds=settings.refresh_interval_seconds,
    )
    resolver = WageResolver(provider, settings)

    if args.command == "forward":
        return asdict(resolver.resolve_forward(args.scale, args.step, args.date))
    if args.command == "reverse":
        return resolver.resolve_reverse(args.salary, args.date, args.hint).to_dict()
    if args.command == "progression":
        forecast = project_progression(
            provider.current(), args.scale, args.step, args.date or today(), settings.wage_basis
        )
        return forecast.to_dict()
    if args.command == "steps":
        return {
            "scale": args.scale,
            "steps": resolver.get_available_steps(args.scale, args.date),
        }
    if args.command == "gross":
        return {
            "full_time_hours": settings.full_time_hours,
            "gross_monthly": calculate_gross_monthly(args.monthly, args.hours, settings=settings),
        }
    if args.command == "scales":
        return {"scales": [asdict(s) for s in resolver.list_scales(active_only=not args.all)]}
    if args.command == "timeline":
        extra = ()
        if args.history:
            extra = normalize_history_rows(_load_rows(args.history), args.entity_id, now=args.now)
        timeline = build_timeline(
            _load_rows(args.records),
            args.entity_id,
            now=args.now,
            settings=settings,
            extra_events=extra,
        )
        return timeline.to_dict()
    raise InputError(f"Unknown command {args.command!r}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the cao-model CLI."""
    args = build_parser().parse_args(argv)
    setup_logging(log_dir=Path(args.log_dir), debug=args.debug, clear_existing=False)
    logger.info("Running %s with arguments: %s", args.command, vars(args))

    try:
        result = run_command(args)
    except OutOfRangeError as e:
        logger.warning("Out of range: %s", e)
        print(json.dumps({"error": "out_of_range", "message": str(e)}))
        return EXIT_OUT_OF_RANGE
    except InputError as e:
        logger.warning("Invalid input: %s", e)
        print(json.dumps({"error": "invalid_input", "message": str(e)}))
        return EXIT_INPUT
    except ConfigError as e:
        logger.error("Configuration error: %s", e, exc_info=True)
        print(json.dumps({"error": "config", "message": str(e)}))
        return EXIT_ERROR
    finally:
        shutdown_logging()

    print(json.dumps(result, indent=2, default=_json_default))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
