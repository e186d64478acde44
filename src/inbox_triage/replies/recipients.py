"""Reply and Reply-All recipient resolution.

Recipients are always derived from the thread's most recent message and the
active account, never from previously computed sets. Toggling between Reply
and Reply-All therefore re-derives from scratch, discarding any manual edits.
"""

from __future__ import annotations

from inbox_triage.models import RecipientSet, Thread
from inbox_triage.parsing.addresses import extract_email, parse_addresses


def _distinct_recipients(thread: Thread) -> set[str]:
    last = thread.last_message
    if last is None:
        return set()
    return set(parse_addresses(last.to_raw)) | set(parse_addresses(last.cc_raw))


def offers_reply_all(thread: Thread) -> bool:
    """Whether the last message had more than one distinct To/Cc recipient.

    This is both the Reply-All default and the condition for offering the
    Reply/Reply-All toggle at all.
    """
    return len(_distinct_recipients(thread)) > 1


def resolve_recipients(
    thread: Thread,
    self_address: str,
    reply_all: bool | None = None,
) -> RecipientSet:
    """Derive reply recipients for ``thread``.

    If the account sent the last message it is waiting on a reply, so the
    original To and Cc are addressed again in either mode. Otherwise the
    sender of the last message goes in To, joined in Reply-All mode by every
    other To address, with the original Cc kept in Cc.

    Args:
        thread: Conversation being replied to.
        self_address: Active account address; excluded everywhere.
        reply_all: Force a mode. None picks Reply-All for group conversations.

    Returns:
        RecipientSet with case-folded, mutually disjoint To/Cc sets.
    """
    last = thread.last_message
    if last is None:
        return RecipientSet()

    me = (self_address or "").strip().lower()
    mode = offers_reply_all(thread) if reply_all is None else reply_all

    to_addrs = parse_addresses(last.to_raw)
    cc_addrs = parse_addresses(last.cc_raw)

    to: list[str] = []
    if last.is_self:
        excluded = {me}
    else:
        sender = extract_email(last.from_raw)
        excluded = {me, sender}
        if "@" in sender and sender != me:
            to.append(sender)

    if last.is_self or mode:
        to.extend(a for a in to_addrs if a not in excluded and a not in to)

    cc: list[str] = []
    if last.is_self or mode:
        cc = [a for a in cc_addrs if a not in excluded and a not in to]

    return RecipientSet(to=to, cc=cc, bcc=[], is_reply_all=mode)


def toggle_reply_all(thread: Thread, self_address: str, current: RecipientSet) -> RecipientSet:
    """Re-derive recipients in the opposite mode of ``current``."""
    return resolve_recipients(thread, self_address, reply_all=not current.is_reply_all)
