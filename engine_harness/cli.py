"""CLI entry point for the cross-engine test harness."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from engine_harness.aggregator import Report, render_report
from engine_harness.config import HarnessConfig, load_config
from engine_harness.errors import HarnessError
from engine_harness.harness import Harness

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_PREPARATION_ERROR = 2


def log_results_summary(log: logging.Logger, report: Report) -> None:
    """Log tallies and every excluded run."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)
    log.info(
        "passed=%d failed=%d other=%d excluded=%d",
        report.passed,
        report.failed,
        report.other,
        len(report.diagnostics),
    )
    for record in report.diagnostics:
        log.info(
            "  excluded: (%s) %s: %s",
            record.engine,
            record.spec_path,
            record.diagnostic.kind,
        )


def run(config: HarnessConfig) -> int:
    """Prepare, execute and report a harness run, returning the exit code."""
    log = logging.getLogger("engine_harness")
    harness = Harness(config=config)

    try:
        prepared = asyncio.run(harness.prepare())
    except (HarnessError, OSError) as e:
        log.error("Preparation failed: %s", e)
        return EXIT_PREPARATION_ERROR

    report = harness.execute(prepared)

    print(render_report(report))
    log_results_summary(log, report)

    return EXIT_FAILURES if report.has_problems else EXIT_OK


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run embedded spec programs against every installed engine"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with harness configuration",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Directory relative paths are resolved against (default: cwd)",
    )
    parser.add_argument(
        "--registry-path",
        type=Path,
        default=None,
        help="Engine registry status document",
    )
    parser.add_argument(
        "--engines-dir",
        type=Path,
        default=None,
        help="Directory holding the engine executables",
    )
    parser.add_argument(
        "--spec-root",
        type=Path,
        default=None,
        help="Directory searched for spec files",
    )
    parser.add_argument(
        "--spec-pattern",
        default=None,
        help="Glob pattern for spec files, relative to the spec root",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(
            args.config,
            base_dir=args.base_dir,
            registry_path=args.registry_path,
            engines_dir=args.engines_dir,
            spec_root=args.spec_root,
            spec_pattern=args.spec_pattern,
        )
    except HarnessError as e:
        logging.getLogger("engine_harness").error("Configuration failed: %s", e)
        sys.exit(EXIT_PREPARATION_ERROR)

    sys.exit(run(config))


if __name__ == "__main__":  # pragma: no cover
    main()
