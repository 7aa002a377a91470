"""Entry point for `python -m batchtrace` and the `batchtrace` CLI script."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from batchtrace.canonical import to_canonical_json
from batchtrace.errors import LedgerError
from batchtrace.replay import ReplayScript, demo_script, load_script, run_script, summarize
from batchtrace.service import SupplyChainService
from batchtrace.settings import RuntimeSettings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="batchtrace", description="Replay supply-chain ledger operations")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: BATCHTRACE_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--events-out",
        type=Path,
        default=None,
        help="Write the hash-chained event log as JSON lines (default: BATCHTRACE_EVENT_LOG_PATH)",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    replay = commands.add_parser("replay", help="Apply a JSON operation script to a fresh ledger")
    replay.add_argument("script", type=Path, help="Path to a {\"operations\": [...]} JSON document")
    commands.add_parser("demo", help="Run the built-in two-supplier scenario")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = RuntimeSettings.from_env()
    except ValueError as exc:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        logging.error("Invalid configuration: %s", exc)
        return 2

    logging.basicConfig(
        level=getattr(logging, args.log_level) if args.log_level else settings.logging_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    script: ReplayScript
    if args.command == "demo":
        script = demo_script()
    else:
        try:
            script = load_script(args.script)
        except (OSError, ValueError) as exc:
            logging.error("Unable to load replay script: %s", exc)
            return 1

    service = SupplyChainService(settings)
    exit_code = 0
    try:
        applied = run_script(service, script)
        logging.info("Applied %d operations", applied)
    except LedgerError as exc:
        logging.error("Replay stopped: %s: %s", type(exc).__name__, exc)
        exit_code = 1

    for summary in summarize(service):
        print(to_canonical_json(summary))
    print(f"chain_verified={service.events.verify_chain()}")

    events_out = args.events_out if args.events_out is not None else settings.event_log_file
    if events_out is not None:
        try:
            service.events.write_jsonl(events_out)
        except OSError as exc:
            logging.error("Unable to write event log: %s", exc)
            return 1
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
