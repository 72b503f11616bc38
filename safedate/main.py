from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from safedate.config import SafeDateConfig, apply_config, load_config
from safedate.core.errors import ConfigurationError, DateTimeError
from safedate.core.time_utils import set_default_timezone
from safedate.native import NativeDateTimeError
from safedate.safe import SafeInstant
from safedate.telemetry import configure_logging


def bootstrap(config_path: Path | None = None) -> tuple[SafeDateConfig, logging.Logger]:
    """Load config (defaults when no file is given), apply it and set up logging."""

    config = load_config(config_path) if config_path is not None else SafeDateConfig()
    apply_config(config)
    log_dir = Path(config.logging.log_dir) if config.logging.log_dir else None
    logger = configure_logging(log_dir=log_dir, level=config.logging.level)
    logger.debug("Bootstrapped safedate", extra={"timezone": config.timezone})
    return config, logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="safedate", description="Inspect and shift date/time values.")
    parser.add_argument("--config", type=Path, default=None, help="Path to safedate.yml")
    parser.add_argument("--timezone", default=None, help="Override the configured default timezone")
    commands = parser.add_subparsers(dest="command", required=True)

    format_cmd = commands.add_parser("format", help="Render a time expression")
    format_cmd.add_argument("time")
    format_cmd.add_argument("format", nargs="?", default=None)

    modify_cmd = commands.add_parser("modify", help="Shift a time expression")
    modify_cmd.add_argument("time")
    modify_cmd.add_argument("modifier")
    modify_cmd.add_argument("--format", default=None)

    parse_cmd = commands.add_parser("parse", help="Parse text with an explicit format")
    parse_cmd.add_argument("input_format")
    parse_cmd.add_argument("text")
    parse_cmd.add_argument("--format", default=None)

    diff_cmd = commands.add_parser("diff", help="Interval between two time expressions")
    diff_cmd.add_argument("start")
    diff_cmd.add_argument("end")
    diff_cmd.add_argument("--absolute", action="store_true")
    diff_cmd.add_argument("--format", default="%R%a days")
    return parser


def run(args: argparse.Namespace, config: SafeDateConfig) -> str:
    if args.command == "format":
        return SafeInstant(args.time).format(args.format or config.default_format)
    if args.command == "modify":
        return SafeInstant(args.time).modify(args.modifier).format(args.format or config.default_format)
    if args.command == "parse":
        instant = SafeInstant.create_from_format(args.input_format, args.text)
        return instant.format(args.format or config.default_format)
    interval = SafeInstant(args.start).diff(SafeInstant(args.end), absolute=args.absolute)
    return interval.format(args.format)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config, logger = bootstrap(args.config)
    except (ConfigurationError, FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    if args.timezone:
        try:
            set_default_timezone(args.timezone)
        except ValueError:
            print(f"error: unknown timezone {args.timezone}", file=sys.stderr)
            return 1
    try:
        output = run(args, config)
    except (DateTimeError, NativeDateTimeError) as exc:
        logger.debug("Command failed", extra={"command": args.command, "error": str(exc)})
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
