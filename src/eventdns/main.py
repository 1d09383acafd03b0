from __future__ import annotations

import argparse
import json
import logging
import sys
from contextlib import ExitStack
from typing import IO, List

from .config.config_parser import build_filter, load_config
from .config.logging_config import init_logging
from .errors import ConfigurationError
from .event import DictEvent
from .filters.dns_filter import DnsFilter

logger = logging.getLogger("eventdns.main")


def run_stream(dns_filter: DnsFilter, source: IO[str], sink: IO[str]) -> int:
    """
    Brief: Filter a stream of JSON-lines events.

    Inputs:
      - dns_filter: Configured DnsFilter.
      - source: Text stream with one JSON object per line.
      - sink: Text stream receiving the filtered events, one per line.

    Outputs:
      - int: Number of events written. Blank lines are skipped; lines that are
        not JSON objects are logged and skipped.
    """
    count = 0
    for lineno, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("skipping line %d: invalid JSON (%s)", lineno, exc)
            continue
        if not isinstance(data, dict):
            logger.warning("skipping line %d: expected a JSON object", lineno)
            continue

        event = DictEvent(data)
        matched = dns_filter.filter(event)
        logger.debug("line %d matched=%s", lineno, matched)
        sink.write(json.dumps(event.to_dict(), ensure_ascii=False) + "\n")
        count += 1
    sink.flush()
    return count


def main(argv: List[str] | None = None) -> int:
    """
    Command line entry point: enrich JSON-lines events with DNS lookups.

    Inputs:
      - argv: Optional argument list (defaults to sys.argv[1:]).

    Outputs:
      - int: Process exit code (0 on success, 1 on configuration errors).

    Example use:
        eventdns --config dns.yaml < events.jsonl > enriched.jsonl
    """
    parser = argparse.ArgumentParser(
        description="Enrich JSON-lines events with forward and reverse DNS lookups"
    )
    parser.add_argument("--config", default="config.yaml", help="Path to YAML config")
    parser.add_argument(
        "--input", default="-", help="JSON-lines input file (default: stdin)"
    )
    parser.add_argument(
        "--output", default="-", help="JSON-lines output file (default: stdout)"
    )
    parser.add_argument(
        "--unknown-keys",
        choices=("error", "warn", "ignore"),
        default="error",
        help="How to treat configuration keys the schema does not describe",
    )
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config, unknown_keys=args.unknown_keys)
    except ConfigurationError as exc:
        init_logging(None)
        logger.error("%s", exc)
        return 1

    init_logging(cfg.get("logging"))

    try:
        dns_filter = build_filter(cfg)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    with ExitStack() as stack:
        source = (
            sys.stdin
            if args.input == "-"
            else stack.enter_context(open(args.input, "r", encoding="utf-8"))
        )
        sink = (
            sys.stdout
            if args.output == "-"
            else stack.enter_context(open(args.output, "w", encoding="utf-8"))
        )
        count = run_stream(dns_filter, source, sink)

    logger.info("processed %d events", count)
    for name, stats in dns_filter.cache_stats().items():
        logger.info("%s cache: %s", name, stats)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
