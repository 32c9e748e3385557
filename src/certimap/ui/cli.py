# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from certimap.app import latest_duplicates, list_establishments, recent_changelog, refresh
from certimap.config import configure_logging
from certimap.domain.model import CategoryFilter

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from certimap.domain.model import ChangelogRecord

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile certified halal establishments")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    refresh_parser = subparsers.add_parser("refresh", help="Fetch, reconcile and store sources")
    refresh_parser.add_argument(
        "--force",
        action="store_true",
        help="Refresh even if the last refresh is younger than the cache window",
    )
    refresh_parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Number of establishments written per commit (defaults to config)",
    )

    list_parser = subparsers.add_parser("list", help="Print stored establishments as JSON")
    list_parser.add_argument(
        "--category",
        choices=[option.value for option in CategoryFilter],
        default=CategoryFilter.ALL.value,
        help="Category bucket to keep (default: %(default)s)",
    )

    history = subparsers.add_parser("history", help="Summarise recent changelog records")
    history.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of records to show, newest first (default: %(default)s)",
    )

    subparsers.add_parser("duplicates", help="Print the latest duplicate report as JSON")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.command == "refresh" and args.batch_size is not None and args.batch_size <= 0:
        raise ValueError("--batch-size must be positive")
    if args.command == "history" and args.limit <= 0:
        raise ValueError("--limit must be positive")


def _changelog_summary(record: ChangelogRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "date": record.date,
        "status": record.status.value,
        "stats": record.stats.to_document(),
        "added": [entry.id for entry in record.added],
        "removed": [entry.id for entry in record.removed],
        "modified": [
            {"id": entry.id, "fields": [change.field for change in entry.changes]}
            for entry in record.modified
        ],
    }


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "refresh":
            result = refresh(force=parsed_args.force, write_batch_size=parsed_args.batch_size)
            if result is None:
                log.info("Refresh skipped, stored data is still fresh (use --force)")
        elif parsed_args.command == "list":
            entities = list_establishments(category=CategoryFilter(parsed_args.category))
            _print_json([entity.to_document() for entity in entities])
        elif parsed_args.command == "history":
            records = recent_changelog(limit=parsed_args.limit)
            _print_json([_changelog_summary(record) for record in records])
        elif parsed_args.command == "duplicates":
            report = latest_duplicates()
            _print_json(
                None
                if report is None
                else {
                    "date": report.date,
                    "count": report.count,
                    "duplicates": [pair.to_document() for pair in report.duplicates],
                }
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
