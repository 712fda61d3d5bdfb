# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to analyze a heap snapshot.
#   This is how users interact with the system.
#
# USAGE:
# ------
#   heapstats <dump-path> [<runtime-resolver-path>] [<symbol-path>]
#   python -m heapstats.cli heap.json types.json --output-dir out/
#
#   Options override the HEAPSTATS_* environment / .env settings:
#     --output-dir, --top-strings, --top-types, --log-level
#
# EXIT STATUS:
# ------------
#   0  report produced (possibly partial, see the summary)
#   1  snapshot could not be opened, no report
#   2  invalid arguments / missing files, nothing attempted
#
# Ctrl+C stops enumeration after the current object and still
# writes the report from what was gathered.
#
# ==============================================

import argparse
import logging
import signal
import sys
from dataclasses import replace
from typing import List, Optional

from heapstats.analyze_heap import HeapAnalysis, RunSummary, analyze_dump
from heapstats.config import AppConfig, get_config
from heapstats.errors import ConfigurationError, ProviderInitError

logger = logging.getLogger(__name__)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heapstats",
        description="Report the types and duplicated strings that dominate a heap snapshot.",
    )
    parser.add_argument("dump_path", help="Path to the JSON heap snapshot.")
    parser.add_argument(
        "resolver_path",
        nargs="?",
        default=None,
        help="Optional runtime resolver file supplying the type table.",
    )
    parser.add_argument(
        "symbol_path",
        nargs="?",
        default=None,
        help="Optional symbol path (accepted, not used for JSON snapshots).",
    )
    parser.add_argument("--output-dir", default=None, help="Directory for report.txt and StringInstanceN.txt.")
    parser.add_argument("--top-strings", type=int, default=None, help="Number of strings to rank.")
    parser.add_argument("--top-types", type=int, default=None, help="Number of types to rank.")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python log level to standard out.",
    )
    return parser


def build_config(args: argparse.Namespace, base: Optional[AppConfig] = None) -> AppConfig:
    """Apply command-line overrides on top of the environment config."""
    config = base or get_config()

    report = config.report
    if args.output_dir is not None:
        report = replace(report, output_dir=args.output_dir)

    ranking = config.ranking
    if args.top_strings is not None:
        ranking = replace(ranking, top_strings=args.top_strings)
    if args.top_types is not None:
        ranking = replace(ranking, top_types=args.top_types)

    return replace(
        config,
        report=report,
        ranking=ranking,
        log_level=args.log_level or config.log_level,
    ).validate()


def _install_cancel_handler(analysis: HeapAnalysis) -> None:
    def handler(signum, frame):
        print("\n⚠ Interrupted by user, finishing current object and writing partial report")
        analysis.cancel()

    signal.signal(signal.SIGINT, handler)


def print_summary(summary: RunSummary) -> None:
    totals = summary.totals
    print("\n📊 Summary:")
    print(f"   → Objects enumerated: {totals.objects_seen} ({summary.outcome.value})")
    print(f"   → Instances: {totals.instance_count} ({totals.instance_bytes} bytes)")
    print(f"   → Strings: {totals.string_count} ({totals.string_bytes} bytes)")
    print(f"   → Skipped: {totals.skipped_count}")
    for reason, count in totals.skip_reasons.items():
        print(f"       {reason}: {count}")
    if summary.failure:
        print(f"⚠ Enumeration stopped early: {summary.failure}")
    if summary.report_path:
        print(f"✓ Report written to {summary.report_path} ({len(summary.string_files)} string files)")
    for error in summary.write_errors:
        print(f"✗ {error}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = get_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        parser.print_usage()
        print(f"✗ {e}")
        return 2

    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO), stream=sys.stdout)
    logger.debug(f"Configured standard out logging at {config.log_level} level")

    previous_handler = signal.getsignal(signal.SIGINT)
    try:
        print(f"🚀 Analyzing {args.dump_path}")
        summary = analyze_dump(
            args.dump_path,
            args.resolver_path,
            args.symbol_path,
            config=config,
            analysis_hook=_install_cancel_handler,
        )
    except ConfigurationError as e:
        parser.print_usage()
        print(f"✗ {e}")
        return 2
    except ProviderInitError as e:
        print(f"✗ {e}")
        return 1
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
