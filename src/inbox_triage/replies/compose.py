"""Reply draft assembly for the bridge's send endpoint."""

from __future__ import annotations

import re
from typing import Optional

from inbox_triage.exceptions import ValidationError
from inbox_triage.models import RecipientSet, ReplyDraft, Thread

RE_PREFIX = re.compile(r"^re:", re.IGNORECASE)


def reply_subject(subject: str | None) -> str:
    """Prefix ``Re: `` unless the subject already carries it."""
    s = (subject or "").strip()
    if RE_PREFIX.match(s):
        return s
    return f"Re: {s}".rstrip()


def _join(addresses: list[str]) -> Optional[str]:
    return ", ".join(addresses) if addresses else None


def build_reply_draft(
    thread: Thread,
    recipients: RecipientSet,
    body: str,
    account: str,
    *,
    subject: str | None = None,
    attachments: list[dict[str, str]] | None = None,
) -> ReplyDraft:
    """Build a ReplyDraft from resolved recipients.

    Args:
        thread: Thread being replied to.
        recipients: Recipients, typically from resolve_recipients.
        body: Reply text.
        account: Sending account.
        subject: Original subject. Defaults to the latest message's subject.
        attachments: Optional attachment dicts passed through to the bridge.

    Raises:
        ValidationError: If there is no To recipient or the body is blank.
    """
    if not recipients.to:
        raise ValidationError("Reply needs at least one To recipient")
    if not body or not body.strip():
        raise ValidationError("Reply body is empty")

    if subject is None:
        subject = next((m.subject for m in reversed(thread.messages) if m.subject), "")

    return ReplyDraft(
        account=account,
        to=", ".join(recipients.to),
        cc=_join(recipients.cc),
        bcc=_join(recipients.bcc),
        subject=reply_subject(subject),
        body=body,
        thread_id=thread.id,
        attachments=list(attachments or []),
    )
