"""Command-line interface for Inbox Triage.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog

from inbox_triage.bridge import BridgeClient
from inbox_triage.config import Settings, get_settings
from inbox_triage.exceptions import ConfigurationError, InboxTriageError
from inbox_triage.models import MutationKind
from inbox_triage.replies import (
    build_reply_draft,
    offers_reply_all,
    render_conversation,
    resolve_recipients,
)
from inbox_triage.triage import OptimisticMutationStore

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inbox-triage", description="Inbox Triage")
    parser.add_argument(
        "--account",
        default=None,
        help="Account to act for (default: settings account)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List inbox items")
    list_parser.add_argument("--query", default=None, help="Search query (default: settings inbox_query)")
    list_parser.add_argument("--limit", type=int, default=None, help="Max results")

    thread_parser = subparsers.add_parser(
        "thread",
        help="Show a thread without quoted chains, plus the default reply recipients",
    )
    thread_parser.add_argument("id", help="Thread ID")
    thread_parser.add_argument(
        "--reply-only",
        action="store_true",
        help="Show Reply recipients instead of the default",
    )

    for kind in (MutationKind.ARCHIVE, MutationKind.TRASH, MutationKind.DONE):
        action_parser = subparsers.add_parser(kind.value, help=f"Mark threads as {kind.value}")
        action_parser.add_argument("ids", nargs="+", help="Thread IDs")

    reply_parser = subparsers.add_parser("reply", help="Reply to a thread")
    reply_parser.add_argument("id", help="Thread ID")
    reply_parser.add_argument("--body", required=True, help="Reply text")
    reply_parser.add_argument("--reply-only", action="store_true", help="Reply to the sender only")

    return parser


def _resolve_account(args: argparse.Namespace, settings: Settings) -> str:
    account = args.account or settings.account
    if not account:
        raise ConfigurationError("No account given. Pass --account or set INBOX_TRIAGE_ACCOUNT.")
    return account


async def _cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    account = _resolve_account(args, settings)
    async with BridgeClient(settings) as bridge:
        items = await bridge.fetch_items(account, query=args.query, max_results=args.limit)

    for item in items:
        read = "READ" if item.read else "UNREAD"
        print(f"{read}\t{item.id}\t{item.received_at or '(no date)'}\t{item.sender}\t{item.subject}")
    return 0


async def _cmd_thread(args: argparse.Namespace, settings: Settings) -> int:
    account = _resolve_account(args, settings)
    async with BridgeClient(settings) as bridge:
        thread = await bridge.fetch_thread(args.id, account)

    for entry in render_conversation(thread):
        marker = " (you)" if entry.is_self else ""
        print(f"--- {entry.sender_name} <{entry.sender_email}>{marker} {entry.date}")
        print(entry.body or "(empty)")
        print()

    reply_all = False if args.reply_only else None
    recipients = resolve_recipients(thread, account, reply_all=reply_all)
    mode = "Reply All" if recipients.is_reply_all else "Reply"
    if thread.has_unsubscribe:
        print("Unsubscribe available")
    print(f"{mode}{' (toggle available)' if offers_reply_all(thread) else ''}")
    print(f"To: {', '.join(recipients.to)}")
    if recipients.cc:
        print(f"Cc: {', '.join(recipients.cc)}")
    return 0


async def _cmd_mutate(args: argparse.Namespace, settings: Settings) -> int:
    account = _resolve_account(args, settings)
    kind = MutationKind(args.command)

    async with BridgeClient(settings) as bridge:
        store = OptimisticMutationStore(bridge, account, settings=settings)
        if not await store.refresh():
            print(f"Could not load the inbox: {store.error}", file=sys.stderr)
            return 1
        mutations = store.apply_bulk(args.ids, kind)
        await store.settle()

    notices = store.drain_notices()
    for notice in notices:
        print(f"FAILED\t{notice.item_id}\t{notice.error}")
    print(f"{kind.value}: {len(mutations) - len(notices)} succeeded, {len(notices)} rolled back")
    return 1 if notices else 0


async def _cmd_reply(args: argparse.Namespace, settings: Settings) -> int:
    account = _resolve_account(args, settings)
    async with BridgeClient(settings) as bridge:
        thread = await bridge.fetch_thread(args.id, account)
        recipients = resolve_recipients(thread, account, reply_all=False if args.reply_only else None)
        draft = build_reply_draft(thread, recipients, args.body, account)
        sent = await bridge.send_reply(draft)

    if not sent:
        print("Reply was not accepted by the bridge")
        return 1
    print(f"Sent '{draft.subject}' to {draft.to}")
    return 0


_COMMANDS = {
    "list": _cmd_list,
    "thread": _cmd_thread,
    "archive": _cmd_mutate,
    "trash": _cmd_mutate,
    "done": _cmd_mutate,
    "reply": _cmd_reply,
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Inbox Triage CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
    )

    logger.info("inbox_triage_started", version="0.1.0", debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    handler = _COMMANDS.get(parsed.command)
    if handler is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    try:
        return asyncio.run(handler(parsed, settings))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except InboxTriageError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
