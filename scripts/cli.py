"""Minimal CLI entry point for running the Gmail label audit by hand."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from gmail_label_audit.config.settings import LabelAuditSettings
from gmail_label_audit.core.models import MailboxIdentity, MailboxOutcome
from gmail_label_audit.pipeline.processor import MailboxProcessor
from gmail_label_audit.storage.bigquery_sink import BigQuerySink
from gmail_label_audit.storage.sink import RecordSink
from gmail_label_audit.storage.writer import JsonlRecordWriter


def setup_logging(level: str) -> None:
    """Configure logging with timestamp and module info."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def on_outcome(outcome: MailboxOutcome) -> None:
    """Print one line per finished mailbox."""
    if outcome.ok:
        print(f"[ok] {outcome.email} counted={outcome.record['countedMessages']}", flush=True)
    else:
        print(f"[failed] {outcome.email}: {outcome.error}", flush=True)


def load_users(path: Path) -> list[dict[str, Any]]:
    """Read Admin Directory users from a JSON object, JSON array, or JSON-lines file."""
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    if isinstance(data, dict):
        return [data]
    return list(data)


def build_sink(settings: LabelAuditSettings) -> RecordSink:
    """Create the sink named by settings.sink."""
    if settings.sink == "jsonl":
        return JsonlRecordWriter(settings.output_path)

    return BigQuerySink.from_settings(settings)


def _add_run_args(subparser: argparse.ArgumentParser) -> None:
    """Add flags shared by the commands that produce records."""
    subparser.add_argument("--label", "-l", help="Label name to audit (default: from settings)")
    subparser.add_argument("--domain", "-d", help="Organization domain (default: from settings)")
    subparser.add_argument(
        "--create-label",
        action="store_true",
        default=None,
        dest="create_label",
        help="Create the label in mailboxes that don't have it",
    )
    subparser.add_argument(
        "--sink",
        choices=["bigquery", "jsonl"],
        default=None,
        help="Where to write records (default: from settings)",
    )
    subparser.add_argument(
        "--output", "-o", type=Path, default=None, help="Output file for the jsonl sink"
    )
    subparser.add_argument(
        "--page-size",
        type=int,
        default=None,
        dest="page_size",
        help="Messages per list request (1-500)",
    )
    subparser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-mailbox timeout in seconds (0 disables)",
    )


def _validate_run_args(args: argparse.Namespace) -> None:
    """Reject out-of-range numeric values."""
    page_size = getattr(args, "page_size", None)
    if page_size is not None and not 1 <= page_size <= 500:
        print("Error: --page-size must be between 1 and 500", file=sys.stderr)
        sys.exit(1)
    if getattr(args, "timeout", None) is not None and args.timeout < 0:
        print("Error: --timeout must be non-negative", file=sys.stderr)
        sys.exit(1)
    if getattr(args, "workers", None) is not None and args.workers <= 0:
        print("Error: --workers must be positive", file=sys.stderr)
        sys.exit(1)


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map CLI flags onto settings field names, skipping unset ones."""
    mapping = {
        "label": "label_name",
        "domain": "domain",
        "create_label": "create_label",
        "sink": "sink",
        "output": "output_path",
        "page_size": "page_size",
        "timeout": "mailbox_timeout_seconds",
        "workers": "max_workers",
    }
    return {
        field: getattr(args, flag)
        for flag, field in mapping.items()
        if getattr(args, flag, None) is not None
    }


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Gmail Label Audit - per-mailbox statistics for a Gmail label"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # process command
    process_parser = subparsers.add_parser("process", help="Audit a single mailbox")
    process_parser.add_argument(
        "--user", "-u", type=Path, required=True, help="Directory user JSON file"
    )
    _add_run_args(process_parser)

    # process-many command
    many_parser = subparsers.add_parser("process-many", help="Audit many mailboxes")
    many_parser.add_argument(
        "--users", "-u", type=Path, required=True, help="JSON array or JSON-lines of users"
    )
    many_parser.add_argument(
        "--workers", "-w", type=int, default=None, help="Mailboxes processed concurrently"
    )
    _add_run_args(many_parser)

    # list-labels command
    labels_parser = subparsers.add_parser("list-labels", help="List a mailbox's labels")
    labels_parser.add_argument("--mailbox", "-m", required=True, help="Mailbox address")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command in ("process", "process-many"):
        _validate_run_args(args)

    settings = LabelAuditSettings(**_settings_overrides(args))
    setup_logging(settings.log_level)

    try:
        if args.command == "list-labels":
            processor = MailboxProcessor(settings=settings)
            client = processor.client_for(args.mailbox)
            labels = client.list_labels()
            print(f"\nFound {len(labels)} labels:\n")
            for label in sorted(labels, key=lambda x: x.get("name", "")):
                print(f"  {label.get('id', ''):40s} {label.get('name', '')}")
            return

        settings.ensure_directories()
        processor = MailboxProcessor(
            settings=settings, sink=build_sink(settings), on_outcome=on_outcome
        )
        users = load_users(args.user if args.command == "process" else args.users)
        identities = [
            MailboxIdentity.from_directory_user(
                user, settings.custom_schema_name, settings.custom_schema_fields
            )
            for user in users
        ]

        if args.command == "process":
            if len(identities) != 1:
                print("Error: --user must contain exactly one user", file=sys.stderr)
                sys.exit(1)
            outcomes = [processor.process(identities[0])]
        else:
            outcomes = processor.process_many(identities)

        failed = [o for o in outcomes if not o.ok]
        print(f"\nComplete: {len(outcomes) - len(failed)} succeeded, {len(failed)} failed")
        if failed:
            sys.exit(1)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
