"""Command line entry point: run a race from a configuration and an events log."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .events import parse_events
from .models import Config
from .results import RESULT_TABLE_FILE, write_result_table

OUTPUT_LOG_FILE = "Output log.txt"

_log = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the race, writing the output log and the result table to the working directory."""
    parser = argparse.ArgumentParser(prog="biathlon")
    parser.add_argument("-c", dest="config", default="", help="Path to configuration file (required)")
    parser.add_argument("-f", dest="events", default="", help="Path to events file (required)")
    args = parser.parse_args(argv)

    if not args.config or not args.events:
        print("Error: Required flags not provided")
        print("Usage: biathlon -c <config> -f <events>")
        parser.print_help(sys.stderr)
        return 1

    print(f"Config file: {args.config}")
    print(f"Events file: {args.events}")

    try:
        config = Config.from_json(Path(args.config).read_bytes())
        with open(args.events, encoding="utf-8", errors="replace", newline="\n") as events, \
                open(OUTPUT_LOG_FILE, "w", encoding="utf-8", newline="\n") as log_file:
            reports, competitors = parse_events(events, config, log_file)
        write_result_table(reports, competitors, RESULT_TABLE_FILE)
    except (OSError, ValueError, IndexError) as exc:
        _log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())