"""
Command line interface for the Schema Analyzer
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Callable, List, Optional, TextIO

from dotenv import load_dotenv

from .config import AnalyzerConfig, ExportFormat, SystemConfig
from .report import ReportNavigator, export, write_export
from .schema import AnalysisResult, analyze_base
from .sources import load_snapshot
from .utils import (
    ConfigurationError,
    FatalAnalysisError,
    SnapshotLoadError,
    format_error_for_operator,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)

VIEW_CHOICES = {
    "overview": None,
    "relationships": "relationships",
    "statistics": "statistics",
    "full": "full",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-analyzer",
        description="Inspect a base and report its tables, fields, views and links",
    )
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Override SCHEMA_ANALYZER_LOG_LEVEL")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_analysis_options(p: argparse.ArgumentParser) -> None:
        p.add_argument("snapshot", help="Path to a JSON or YAML base snapshot")
        p.add_argument("--max-samples", type=int, default=None,
                       help="Maximum sample records per table")
        p.add_argument("--no-field-ids", action="store_true", help="Hide field IDs")
        p.add_argument("--no-relationships", action="store_true",
                       help="Skip relationship derivation")
        p.add_argument("--no-statistics", action="store_true",
                       help="Skip statistics derivation")

    analyze = sub.add_parser("analyze", help="Analyze a base and print or export the report")
    add_analysis_options(analyze)
    analyze.add_argument("--format", choices=[f.value for f in ExportFormat],
                         help="Print an export in this format instead of a report screen")
    analyze.add_argument("--output", help="Write the export to this file")
    analyze.add_argument("--view", choices=sorted(VIEW_CHOICES), default="overview",
                         help="Report screen to print (default: overview)")

    explore = sub.add_parser("explore", help="Analyze a base and browse the report interactively")
    add_analysis_options(explore)

    return parser


def resolve_config(base: AnalyzerConfig, args: argparse.Namespace) -> AnalyzerConfig:
    """Apply command line overrides to the environment configuration"""
    return base.with_overrides(
        max_sample_records=args.max_samples,
        include_field_ids=False if args.no_field_ids else None,
        compute_relationships=False if args.no_relationships else None,
        compute_statistics=False if args.no_statistics else None,
    )


def run_analysis(snapshot_path: str, config: AnalyzerConfig) -> AnalysisResult:
    base = load_snapshot(snapshot_path)
    return asyncio.run(analyze_base(base, config))


def explore_report(
    navigator: ReportNavigator,
    input_fn: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
) -> None:
    """Interactive loop over the report state machine"""
    while not navigator.is_done:
        out.write(navigator.render() + "\n\n")
        choices = navigator.available_choices()
        for i, choice in enumerate(choices, 1):
            out.write(f"  {i}. {choice}\n")

        try:
            answer = input_fn("Select an option: ").strip()
        except (EOFError, KeyboardInterrupt):
            # Closed input ends the session
            out.write("\n")
            navigator.select("done")
            break
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            answer = choices[int(answer) - 1]
        try:
            navigator.select(answer)
        except ValueError as e:
            out.write(f"{e}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        system = SystemConfig.from_env(dotenv=False)
        config = resolve_config(system.analyzer, args)
    except ConfigurationError as e:
        print(format_error_for_operator(e), file=sys.stderr)
        return 2

    setup_logging(
        level=args.log_level or system.log_level,
        json_format=args.json_logs or system.json_logs,
        log_file=system.log_file,
    )

    try:
        result = run_analysis(args.snapshot, config)
    except (FatalAnalysisError, SnapshotLoadError) as e:
        print(e.message, file=sys.stderr)
        return 1

    if result.outcomes:
        logger.warning(
            f"Analysis completed with {len(result.outcomes)} skipped or degraded items"
        )

    navigator = ReportNavigator(result.model, config, system.report)

    if args.cmd == "explore":
        explore_report(navigator)
        return 0

    if args.output:
        write_export(result.model, args.output, args.format, config.include_field_ids)
    elif args.format:
        print(export(result.model, args.format, config.include_field_ids))
    else:
        choice = VIEW_CHOICES[args.view]
        if choice:
            navigator.select(choice)
        print(navigator.render())

    return 0


if __name__ == "__main__":
    sys.exit(main())
