"""Ballot CLI — command-line interface for a single election.

Usage:
    python -m ballot.cli status
    python -m ballot.cli run --scenario scenarios/delegation.json --events
    python -m ballot.cli check-invariants --scenario scenarios/delegation.json

Election settings (chairperson, proposals) come from --env-file and the
environment; see ballot.config.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from ballot.config import BallotConfig, load_config
from ballot.scenario import load_scenario, run_scenario
from ballot.service import BallotService


DEFAULT_ENV_FILE = Path(".env")


def _load(args: argparse.Namespace) -> BallotConfig:
    return load_config(env_file=args.env_file)


def cmd_status(args: argparse.Namespace) -> int:
    service = BallotService.from_config(_load(args))
    print(json.dumps(service.status(), indent=2))
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Replay a scenario and print each result plus the final status."""
    try:
        scenario = load_scenario(args.scenario)
    except (OSError, ValueError) as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    service = scenario.build_service(_load(args))
    results = run_scenario(service, scenario)
    output = {
        "results": [
            {"success": r.success, "errors": r.errors, "data": r.data}
            for r in results
        ],
        "status": service.status(),
    }
    if args.events:
        output["events"] = [e.to_dict() for e in service.event_log.events()]
    print(json.dumps(output, indent=2))

    rejected = [r for r in results if not r.success]
    if args.strict and rejected:
        print(f"Failed: {len(rejected)} operation(s) rejected", file=sys.stderr)
        return 1
    return 0


def cmd_check_invariants(args: argparse.Namespace) -> int:
    """Replay a scenario and audit the resulting ledger."""
    try:
        scenario = load_scenario(args.scenario)
    except (OSError, ValueError) as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    service = scenario.build_service(_load(args))
    run_scenario(service, scenario)
    errors = service.check_invariants()
    if errors:
        for error in errors:
            print(f"FAIL: {error}", file=sys.stderr)
        return 1
    print("All ledger invariants hold.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ballot",
        description="Delegated Ballot — single-election voting ledger CLI",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_FILE,
        help="Path to .env file with BALLOT_* settings (default: .env)",
    )
    sub = parser.add_subparsers(dest="command")

    # status
    sub.add_parser("status", help="Show a fresh election built from config")

    # run
    p_run = sub.add_parser("run", help="Replay a JSON scenario")
    p_run.add_argument("--scenario", type=Path, required=True, help="Scenario file")
    p_run.add_argument("--events", action="store_true", help="Include the audit trail")
    p_run.add_argument(
        "--strict", action="store_true",
        help="Exit non-zero if any operation is rejected",
    )

    # check-invariants
    p_check = sub.add_parser("check-invariants", help="Replay a scenario and audit the ledger")
    p_check.add_argument("--scenario", type=Path, required=True, help="Scenario file")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "status": cmd_status,
        "run": cmd_run,
        "check-invariants": cmd_check_invariants,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except ValueError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
