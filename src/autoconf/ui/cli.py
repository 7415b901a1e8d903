# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from autoconf.adapters.registry import load_trigger_snapshot
from autoconf.app import (
    default_record_store,
    list_stored_records,
    reconcile_snapshot,
    render_properties,
)
from autoconf.config import ConfigurationError, configure_logging, get_policy_path, load_policy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from autoconf.domain.model import ManagedRecord, Policy, Trigger

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile managed configuration records")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every record operation",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Print resolved properties without storing them")
    _add_input_arguments(render)
    render.add_argument(
        "--aggregate",
        action="store_true",
        help="Render once against the aggregate view of all matched triggers",
    )

    reconcile = subparsers.add_parser("reconcile", help="Reconcile records into the database")
    _add_input_arguments(reconcile)
    reconcile.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data directory)",
    )
    reconcile.add_argument(
        "--keep-existing",
        action="store_true",
        help="Do not delete records left for the target by a previous run",
    )

    records = subparsers.add_parser("records", help="Print persisted records as JSON")
    records.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data directory)",
    )
    records.add_argument(
        "--target",
        type=str,
        help="Only list records of this target identity",
    )

    return parser.parse_args(list(argv))


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--policy",
        type=str,
        help="Policy document (.toml or .json); defaults to AUTOCONF_POLICY_FILE",
    )
    parser.add_argument(
        "--triggers",
        type=str,
        required=True,
        help="JSON list of triggers: [{\"id\": ..., \"attributes\": {...}}]",
    )


def _load_inputs(args: argparse.Namespace) -> tuple[Policy, tuple[Trigger, ...]]:
    policy_path = args.policy or get_policy_path()
    return load_policy(policy_path), load_trigger_snapshot(args.triggers)


def _record_payload(record: ManagedRecord) -> dict[str, object]:
    return {
        "record_id": record.record_id,
        "target_identity": record.target_identity,
        "scope": record.scope,
        "is_template": record.is_template,
        "properties": record.properties,
    }


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=list))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    policy: Policy | None = None
    triggers: tuple[Trigger, ...] = ()
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(verbose=parsed_args.verbose)
        if parsed_args.command in {"render", "reconcile"}:
            policy, triggers = _load_inputs(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "render" and policy is not None:
            rendered = render_properties(policy, triggers, aggregate=parsed_args.aggregate)
            _print_json(
                [
                    {"trigger": entry.trigger_id, "properties": entry.properties}
                    for entry in rendered
                ]
            )
        elif parsed_args.command == "reconcile" and policy is not None:
            store = default_record_store(database_uri=parsed_args.database_uri)
            result = reconcile_snapshot(
                policy,
                triggers,
                store,
                replace_existing=not parsed_args.keep_existing,
            )
            for failure in result.outcome.failures:
                log.warning(
                    "Failed to %s record for %s: %s",
                    failure.operation,
                    failure.trigger_id or "shared view",
                    failure.error,
                )
            log.info("Reconciled %s record(s) for %s", len(result.records), policy.target_identity)
        elif parsed_args.command == "records":
            store = default_record_store(database_uri=parsed_args.database_uri)
            records = list_stored_records(store, target_identity=parsed_args.target)
            _print_json([_record_payload(record) for record in records])
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
