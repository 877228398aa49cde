from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from memcalc import __version__
from memcalc.core.calc.errors import MemoryCalculatorError
from memcalc.core.calc.regions import MatchStrategy
from memcalc.core.config import CalculatorConfig
from memcalc.core.display.formatter import render_report
from memcalc.core.runtime.memory_calculator import MemoryCalculatorService

EPILOG = """\
Examples:
  memory-calculator
  memory-calculator --thread-count=300 --head-room=10
  memory-calculator --total-memory=2G
  memory-calculator --quiet --total-memory=2G   # only output JVM parameters
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="memory-calculator",
        description="Calculates JVM memory settings from container or host memory limits.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("--total-memory", help="Total memory (e.g. 2G, 512M, 1024MB, 1.5G); detected when omitted")
    ap.add_argument("--thread-count", type=int, help="JVM thread count (default 250)")
    ap.add_argument("--loaded-class-count", type=int, help="JVM loaded class count (estimated when omitted)")
    ap.add_argument("--head-room", type=int, help="Head room percentage, 0-99 (default 0)")
    ap.add_argument("--flags", dest="java_tool_options", help="Existing JVM options (default $JAVA_TOOL_OPTIONS)")
    ap.add_argument("--match-strategy", choices=["strict", "prefix"], help="How region flags are recognized")
    ap.add_argument("--quiet", action="store_true", default=None, help="Only output JVM parameters")
    ap.add_argument("--version", action="store_true", help="Show version information")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print("JVM Memory Calculator")
        print(f"Version: {__version__}")
        return 0

    try:
        config = CalculatorConfig.from_env()
        config = config.merged(
            total_memory=args.total_memory,
            thread_count=args.thread_count,
            loaded_class_count=args.loaded_class_count,
            head_room=args.head_room,
            java_tool_options=args.java_tool_options,
            match_strategy=MatchStrategy(args.match_strategy) if args.match_strategy else None,
            quiet=args.quiet,
        )
    except MemoryCalculatorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.WARNING if config.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = MemoryCalculatorService().execute(config)
    except MemoryCalculatorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if config.quiet:
        sys.stdout.write(result.java_tool_options)
    else:
        print(
            render_report(
                result.regions,
                total_memory=result.total_memory,
                thread_count=result.thread_count,
                loaded_class_count=result.loaded_class_count,
                head_room=result.head_room,
                java_tool_options=result.java_tool_options,
            )
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
