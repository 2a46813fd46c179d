# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""CLI for coverage report formatting"""

from __future__ import annotations

import sys
from argparse import ArgumentParser, Namespace
from locale import LC_ALL, setlocale
from logging import DEBUG, INFO, WARN, basicConfig, getLogger
from os import getenv
from pathlib import Path
from typing import List, Optional

from .config import ReportConfig
from .hitmap import find_coverage_files, parse_coverage

LOG = getLogger(__name__)


def configure_logging(level: int = INFO) -> None:
    """Configure a log handler.

    Arguments:
        level: Log verbosity constant from the `logging` module.
    """
    setlocale(LC_ALL, "")
    basicConfig(format="[%(levelname).1s] %(message)s", level=level)


def _define_logging_args(parser: ArgumentParser) -> None:
    log_levels = parser.add_mutually_exclusive_group()
    log_levels.add_argument(
        "--quiet",
        "-q",
        dest="log_level",
        action="store_const",
        const=WARN,
        help="Show less logging output.",
    )
    log_levels.add_argument(
        "--verbose",
        "-v",
        dest="log_level",
        action="store_const",
        const=DEBUG,
        help="Show more logging output.",
    )
    parser.set_defaults(
        log_level=INFO,
    )


def _define_resolver_args(parser: ArgumentParser) -> None:
    tables = parser.add_mutually_exclusive_group()
    tables.add_argument(
        "--packages",
        help="Path to a .packages file (default: HITMAP_PACKAGES, unless the "
        "config file names a package table).",
    )
    tables.add_argument(
        "--package-table",
        help="YAML mapping of package name to root directory.",
    )
    parser.add_argument(
        "--sdk-root",
        help="SDK checkout used to resolve dart: scripts (default: HITMAP_SDK_ROOT).",
    )


def _define_report_args(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--report-on",
        action="append",
        metavar="PREFIX",
        help="Only report files under this path prefix (may be repeated).",
    )
    parser.add_argument(
        "--base-directory",
        "-b",
        dest="base_path",
        help="Write file paths relative to this directory.",
    )
    formats = parser.add_mutually_exclusive_group()
    formats.add_argument(
        "--lcov",
        dest="output_format",
        action="store_const",
        const="lcov",
        help="Write an LCOV tracefile (default).",
    )
    formats.add_argument(
        "--pretty-print",
        dest="output_format",
        action="store_const",
        const="pretty-print",
        help="Write sources annotated with hit counts.",
    )
    parser.add_argument(
        "--workers",
        "-j",
        type=int,
        help="Number of sources to load in parallel for --pretty-print.",
    )


def parse_args(argv: Optional[List[str]] = None) -> Namespace:
    """Parse command-line arguments.

    Arguments:
        argv: Argument list, or sys.argv if None.

    Returns:
        parsed result
    """
    parser = ArgumentParser(
        prog="format-coverage", description="Format coverage hit maps as reports."
    )
    _define_logging_args(parser)
    _define_resolver_args(parser)
    _define_report_args(parser)
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML report configuration. Command-line options take precedence.",
    )
    parser.add_argument(
        "--out",
        "-o",
        type=Path,
        help="Output file (default: stdout).",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        metavar="INPUT",
        help="Coverage JSON file, or directory to search for *.json files.",
    )

    result = parser.parse_args(argv)
    if result.workers is not None and result.workers < 1:
        parser.error("--workers must be at least 1")
    for path in result.inputs:
        if not path.exists():
            parser.error(f"input does not exist: {path}")
    return result


def build_config(args: Namespace) -> ReportConfig:
    """Combine the configuration file (if any) with command-line overrides."""
    config = ReportConfig.from_file(args.config) if args.config else ReportConfig()
    config = config.overlay(
        report_on=args.report_on,
        base_path=args.base_path,
        packages=args.packages,
        package_table=args.package_table,
        sdk_root=args.sdk_root,
        output_format=args.output_format,
        workers=args.workers,
    )
    # an explicit package table replaces a .packages file from the config file
    if args.package_table is not None:
        config.packages = None
    elif args.packages is not None:
        config.package_table = None
    # environment defaults only fill what neither source set
    if config.packages is None and config.package_table is None:
        config.packages = getenv("HITMAP_PACKAGES")
    if config.sdk_root is None:
        config.sdk_root = getenv("HITMAP_SDK_ROOT")
    return config


def format_coverage(args: Namespace) -> int:
    """Load coverage dumps and write the selected report.

    Arguments:
        args: Arguments as returned by `parse_args()`

    Returns:
        exit code
    """
    config = build_config(args)
    files = [found for path in args.inputs for found in find_coverage_files(path)]
    LOG.info("Found %d coverage files", len(files))
    hitmap = parse_coverage(files)

    resolver = config.build_resolver()
    formatter = config.build_formatter(resolver)
    report = formatter.render(hitmap)

    if args.out is not None:
        args.out.write_text(report.text, encoding="utf-8")
        LOG.info("Wrote %s report to %s", config.output_format, args.out)
    else:
        sys.stdout.write(report.text)

    if report.skipped:
        LOG.warning("Skipped %d files", len(report.skipped))
    for script_id in sorted(resolver.failed):
        LOG.debug("unresolved: %s", script_id)
    return 0


def main() -> None:
    """Coverage formatting entrypoint. Does not return."""
    args = parse_args()
    configure_logging(level=args.log_level)
    sys.exit(format_coverage(args))
