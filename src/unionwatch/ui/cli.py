from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from unionwatch.app import (
    delete_union,
    ingest_source,
    investigate,
    open_app,
    refresh_all,
    refresh_union,
)
from unionwatch.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from unionwatch.app import AppContext
    from unionwatch.domain.reconciliation import BatchProgress

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Investigate unions and keep their records up to date"
    )
    parser.add_argument(
        "--store",
        choices=("firebase", "sqlite"),
        help="Union store backend (defaults to UNIONWATCH_STORE or firebase)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    investigate_cmd = subparsers.add_parser(
        "investigate", help="Investigate a union by name and store its profile"
    )
    investigate_cmd.add_argument("name", type=str, help="Display name of the union")
    investigate_cmd.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the merged record without saving it",
    )

    refresh = subparsers.add_parser("refresh", help="Re-investigate one stored union")
    refresh.add_argument("slug", type=str, help="Slug of the stored union")

    refresh_all_cmd = subparsers.add_parser(
        "refresh-all", help="Re-investigate every stored union, one at a time"
    )
    refresh_all_cmd.add_argument(
        "--cooldown",
        type=float,
        default=None,
        help="Seconds to wait between unions (defaults to config)",
    )

    analyze = subparsers.add_parser(
        "analyze-url", help="Extract events or agreements from a source URL"
    )
    analyze.add_argument("url", type=str, help="Article or social media post to analyse")
    analyze.add_argument(
        "--save",
        action="store_true",
        help="Save the merged record instead of only showing it",
    )

    subparsers.add_parser("list", help="List stored unions")

    delete = subparsers.add_parser("delete", help="Delete a stored union")
    delete.add_argument("slug", type=str, help="Slug of the stored union")

    parsed = parser.parse_args(list(argv))
    if getattr(parsed, "cooldown", None) is not None and parsed.cooldown < 0:
        raise ValueError("Cooldown must be non-negative")
    return parsed


def _log_progress(progress: BatchProgress) -> None:
    log.info("[%s/%s] Refreshing %s", progress.index, progress.total, progress.name)


async def _run(args: argparse.Namespace) -> None:
    context: AppContext
    async with await open_app(backend=args.store) as context:
        if args.command == "investigate":
            applied = await investigate(context, args.name, save=not args.dry_run)
            union = applied.union
            log.info(
                "%s (%s): %s leaders, %s agreements, %s events%s",
                union.name,
                union.slug,
                len(union.leadership),
                len(union.agreements),
                len(union.events),
                " [new]" if applied.is_new else "",
            )
        elif args.command == "refresh":
            union = await refresh_union(context, args.slug)
            log.info("Refreshed %s (%s)", union.name, union.slug)
        elif args.command == "refresh-all":
            report = await refresh_all(
                context, cooldown_seconds=args.cooldown, on_progress=_log_progress
            )
            for failure in report.failed:
                log.warning("Failed %s (%s): %s", failure.name, failure.slug, failure.message)
        elif args.command == "analyze-url":
            applied = await ingest_source(context, args.url, save=args.save)
            log.info(
                "%s (%s): added=%s skipped=%s%s",
                applied.union.name,
                applied.union.slug,
                applied.added,
                applied.skipped,
                "" if args.save else " (not saved, pass --save to store it)",
            )
        elif args.command == "list":
            for union in context.view.unions:
                log.info(
                    "%s\t%s\t%s events\t%s agreements",
                    union.slug,
                    union.name,
                    len(union.events),
                    len(union.agreements),
                )
        elif args.command == "delete":
            await delete_union(context, args.slug)
        else:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        asyncio.run(_run(parsed_args))
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
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
