"""Command line front end: check addresses and ranges against GitHub's IP ranges."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from ..meta import MetaFetchError, fetch_from_settings
from ..ranges import ClassificationReport, RangeEvaluator, ReportOutcome
from ..settings import CidrCalcSettings, load_settings

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit"}
LOG_FORMAT = "%(levelname)s: %(message)s"


def render_report(report: ClassificationReport) -> List[str]:
    """Return human-readable lines for one report."""
    raw = report.text
    if report.outcome is ReportOutcome.INVALID_INPUT:
        return [f"{raw} -> invalid IP address or CIDR ({report.error})"]

    if report.outcome is ReportOutcome.RANGE_TOO_LARGE:
        return [
            f"{raw} -> CIDR range too large ({report.address_count} addresses, threshold is {report.threshold}). "
            "Skipping evaluation.",
            "Warning: Large CIDR ranges are not evaluated. Use a more specific range or raise --threshold.",
        ]

    if report.outcome is ReportOutcome.ADDRESS:
        if not report.labels:
            return [f"{raw} -> not owned by GitHub (based on current meta data)"]
        return [f"{raw} -> owned by GitHub ({', '.join(report.labels)})"]

    lines = [
        f"{raw} -> evaluated {report.evaluated} addresses:",
        f"  - Owned by GitHub: {report.owned}",
        f"  - Not owned: {report.not_owned}",
    ]
    if report.distribution:
        lines.append("  - Label distribution:")
        lines.extend(f"    - {signature}: {count} addresses" for signature, count in report.distribution)
    return lines


def _emit(report: ClassificationReport, output: str, stream: TextIO) -> None:
    if output == "json":
        stream.write(json.dumps(report.to_dict(), sort_keys=True) + "\n")
        return
    for line in render_report(report):
        stream.write(line + "\n")


def run_interactive(evaluator: RangeEvaluator, output: str, stdin: TextIO, stdout: TextIO) -> None:
    """Prompt for inputs until end of file or an exit command."""
    stdout.write("Enter an IP address to check (type 'exit' to quit):\n")
    while True:
        stdout.write("> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            break
        text = line.strip()
        if not text:
            continue
        if text.lower() in EXIT_COMMANDS:
            break
        _emit(evaluator.classify(text), output, stdout)


def _build_settings(args: argparse.Namespace) -> CidrCalcSettings:
    config = {
        "endpoint_url": args.endpoint,
        "cache_dir": False if args.no_cache else args.cache_dir,
        "request_timeout": args.timeout,
        "threshold": args.threshold,
    }
    return load_settings(config)


def main(argv: Iterable[str] | None = None, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    """Run the checker CLI and return an exit status."""
    parser = argparse.ArgumentParser(description="Check IP addresses and CIDR ranges against GitHub's IP ranges")
    parser.add_argument("inputs", nargs="*", help="IP addresses or CIDR ranges (interactive prompt if omitted)")
    cache_group = parser.add_mutually_exclusive_group()
    cache_group.add_argument("--cache-dir", type=Path, help="Directory for the cached meta payload")
    cache_group.add_argument("--no-cache", action="store_true", help="Disable the on-disk meta cache")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for the meta endpoint")
    parser.add_argument("--threshold", type=int, help="Largest CIDR range to enumerate")
    parser.add_argument("--endpoint", help="Meta endpoint URL")
    parser.add_argument("--output", choices=("text", "json"), default="text")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.threshold is not None and args.threshold < 0:
        parser.error("--threshold must be non-negative")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    settings = _build_settings(args)

    if args.output == "text":
        stdout.write("Fetching GitHub IP ranges...\n")
    try:
        store = fetch_from_settings(settings)
    except MetaFetchError as exc:
        logger.debug("Meta fetch failed", exc_info=True)
        sys.stderr.write(f"error: {exc}\n")
        return 1

    if args.output == "text":
        stdout.write(f"Loaded {len(store)} CIDR blocks from GitHub.\n")

    evaluator = RangeEvaluator(store, threshold=settings.threshold)
    if args.inputs:
        for text in args.inputs:
            _emit(evaluator.classify(text), args.output, stdout)
        return 0

    run_interactive(evaluator, args.output, stdin, stdout)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
