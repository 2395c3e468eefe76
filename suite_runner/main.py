"""Entry point for the test runner.

Parses command-line arguments, selects the tests to run, executes them
with their prerequisites and finalises the report.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from suite_runner.config.registry import RegistryError, TestRegistry
from suite_runner.config.settings import RunnerConfig
from suite_runner.data.loader import DataLoader
from suite_runner.execution.engine import ExecutionEngine, ExecutionResult
from suite_runner.log import log
from suite_runner.reporting.reporter import Reporter, ReportError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="suite-runner",
        description="Run registered tests with their prerequisites",
    )
    selection = parser.add_mutually_exclusive_group()
    selection.add_argument(
        "--all",
        action="store_true",
        default=False,
        help="Run all tests",
    )
    selection.add_argument(
        "--tag",
        metavar="TAG",
        default=None,
        help="Run tests with a specific tag",
    )
    selection.add_argument(
        "--test",
        metavar="NAME",
        default=None,
        help="Run a specific test",
    )
    selection.add_argument(
        "--tests",
        metavar="NAME",
        nargs="*",
        default=None,
        help="Run multiple tests",
    )
    parser.add_argument(
        "--registry",
        type=Path,
        default=None,
        help="Path to the test registry manifest (YAML or JSON)",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the .runner_config JSON file",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        default=False,
        help="Do not open the report after the run",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def _has_selection(args: argparse.Namespace) -> bool:
    return bool(args.all or args.tag or args.test or args.tests)


async def _dispatch(
    engine: ExecutionEngine, args: argparse.Namespace
) -> ExecutionResult | None:
    """Run the test selection named by the arguments."""
    if args.tag:
        return await engine.run_by_tag(args.tag)
    if args.all:
        tests = list(engine.registry.get_all_tests())
    elif args.test:
        tests = [args.test]
    else:
        tests = list(args.tests)
    return await engine.run(tests)


def _finalize_report(reporter: Reporter, open_report: bool) -> None:
    """Generate the report and optionally open it."""
    reporter.generate_report()
    if not open_report:
        return
    try:
        reporter.open_report()
    except ReportError as e:
        log(
            f"Could not automatically open report ({e}). "
            f"Open {reporter.html_path} manually.",
            "warn",
        )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not _has_selection(args):
        parser.print_help()
        return 0

    config = RunnerConfig(args.config_file)
    registry_path = args.registry or config.registry

    try:
        registry = TestRegistry.load(registry_path)
    except FileNotFoundError:
        log(f"Test registry not found: {registry_path}", "error")
        return 1
    except RegistryError as e:
        log(str(e), "error")
        return 1
    except (OSError, ValueError) as e:
        log(f"Could not read test registry {registry_path}: {e}", "error")
        return 1

    reporter = Reporter(config.results_dir, config.report_dir)
    engine = ExecutionEngine(registry, DataLoader(registry), reporter)

    try:
        result = asyncio.run(_dispatch(engine, args))
        if result is None:
            return 0
        _finalize_report(reporter, config.open_report and not args.no_open)
    except (ValueError, OSError) as e:
        log(f"Error running tests: {e}", "error")
        return 1

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
