"""Helpers for converting bridge payloads into internal models.

Bridge payloads are loosely typed JSON. Missing or mistyped fields become
empty values instead of errors, so a partial payload still renders.
"""

from __future__ import annotations

from typing import Any

from inbox_triage.models import Item, Message, Thread

from .addresses import extract_email


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ", ".join(_text(v) for v in value if v is not None)
    return ""


def _int(value: Any, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _labels(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(x) for x in value if isinstance(x, str)]


def payload_to_message(payload: Any, account: str = "") -> Message:
    """Convert one bridge message dict to a Message.

    ``is_self`` is taken from the bridge's ``isMe`` flag when present and
    otherwise derived by comparing the sender with ``account``.
    """
    data = payload if isinstance(payload, dict) else {}

    from_raw = _text(data.get("from"))
    is_me = data.get("isMe")
    if isinstance(is_me, bool):
        is_self = is_me
    else:
        sender = extract_email(from_raw)
        is_self = bool(account) and bool(sender) and sender == account.strip().lower()

    markup = data.get("bodyHtml")
    return Message(
        id=_text(data.get("id")),
        from_raw=from_raw,
        to_raw=_text(data.get("to")),
        cc_raw=_text(data.get("cc")),
        date=_text(data.get("date")),
        subject=_text(data.get("subject")),
        body_text=_text(data.get("body")),
        body_markup=markup if isinstance(markup, str) and markup else None,
        is_self=is_self,
    )


def payload_to_thread(thread_id: str, payload: Any, account: str = "") -> Thread:
    """Convert a bridge thread response to a Thread.

    Args:
        thread_id: ID the thread was requested by.
        payload: Bridge JSON response.
        account: Active account, used to derive ``is_self``.

    Returns:
        Thread: Messages in the order the bridge returned them (chronological).
    """
    data = payload if isinstance(payload, dict) else {}
    raw_messages = data.get("messages")
    if not isinstance(raw_messages, list):
        raw_messages = []

    messages = tuple(payload_to_message(m, account) for m in raw_messages if isinstance(m, dict))
    return Thread(
        id=thread_id,
        messages=messages,
        message_count=_int(data.get("messageCount"), len(messages)),
        has_unsubscribe=bool(data.get("hasUnsubscribe")),
    )


def payload_to_item(payload: Any) -> Item | None:
    """Convert one inbox listing entry to an Item, or None if it has no ID."""
    if not isinstance(payload, dict):
        return None
    item_id = _text(payload.get("id"))
    if not item_id:
        return None

    labels = _labels(payload.get("labels"))
    read = payload.get("read")
    return Item(
        id=item_id,
        sender=_text(payload.get("from")),
        subject=_text(payload.get("subject")),
        received_at=_text(payload.get("date")),
        read=read if isinstance(read, bool) else "UNREAD" not in labels,
        labels=labels,
        message_count=_int(payload.get("messageCount"), 1),
        snippet=_text(payload.get("snippet")),
    )


def payload_to_items(payload: Any) -> list[Item]:
    """Convert an inbox listing response to Items, skipping malformed entries."""
    data = payload if isinstance(payload, dict) else {}
    raw_items = data.get("emails")
    if not isinstance(raw_items, list):
        return []
    items = [payload_to_item(e) for e in raw_items]
    return [i for i in items if i is not None]
