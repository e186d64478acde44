"""Data models for Inbox Triage.

This module contains Pydantic models for data validation and serialization.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .thread import Message, Thread


class MutationKind(str, Enum):
    """Triage action applied to an inbox item."""

    ARCHIVE = "archive"
    IGNORE = "ignore"
    TRASH = "trash"
    DONE = "done"
    DEAL = "deal"
    REQUEST = "request"

    @property
    def remote_action(self) -> Optional[str]:
        """Bridge action for mail mutations, None for deal creation."""
        return _REMOTE_ACTIONS.get(self)

    @property
    def offers_similar(self) -> bool:
        """Whether a single-item mutation of this kind can seed a similarity prompt."""
        return self in (MutationKind.ARCHIVE, MutationKind.IGNORE)


# "ignore" is the inbox's plain archive button; the bridge only knows archive.
_REMOTE_ACTIONS = {
    MutationKind.ARCHIVE: "archive",
    MutationKind.IGNORE: "archive",
    MutationKind.TRASH: "trash",
    MutationKind.DONE: "done",
}


class Item(BaseModel):
    """An inbox row: one email thread as listed by the bridge."""

    id: str = Field(description="Thread ID")
    sender: str = Field(default="", description="Raw From header of the latest message")
    subject: str = Field(default="", description="Thread subject")
    received_at: str = Field(default="", description="Date string of the latest message")
    read: bool = Field(default=True, description="Whether the thread has been read")
    labels: list[str] = Field(default_factory=list, description="Mailbox labels")
    message_count: int = Field(default=1, description="Number of messages in the thread")
    snippet: str = Field(default="", description="Short body preview")

    def metadata(self) -> dict[str, object]:
        """Context sent alongside a mutation for downstream learning."""
        return {"from": self.sender, "subject": self.subject, "labels": list(self.labels)}


class RecipientSet(BaseModel):
    """Reply recipients derived from a thread.

    Addresses are lower-cased. No address appears in more than one of
    to/cc/bcc, and the active account is never present.
    """

    to: list[str] = Field(default_factory=list, description="To addresses")
    cc: list[str] = Field(default_factory=list, description="Cc addresses")
    bcc: list[str] = Field(default_factory=list, description="Bcc addresses")
    is_reply_all: bool = Field(default=False, description="Whether this is a Reply-All set")

    @property
    def is_empty(self) -> bool:
        return not (self.to or self.cc or self.bcc)


class ReplyDraft(BaseModel):
    """A reply ready for the bridge's send endpoint."""

    account: str = Field(description="Sending account")
    to: str = Field(description="Comma-joined To header")
    cc: Optional[str] = Field(default=None, description="Comma-joined Cc header")
    bcc: Optional[str] = Field(default=None, description="Comma-joined Bcc header")
    subject: str = Field(description="Reply subject")
    body: str = Field(description="Reply body")
    thread_id: str = Field(description="Thread being replied to")
    attachments: list[dict[str, str]] = Field(
        default_factory=list,
        description="Attachments as {filename, mimeType, data} dicts",
    )


class PendingMutation(BaseModel):
    """Bookkeeping for one optimistic mutation awaiting its remote result."""

    mutation_id: int = Field(description="Monotonic id, unique within a store")
    item_id: str = Field(description="Item hidden by this mutation")
    kind: MutationKind = Field(description="Triage action")
    prior_ignored_state: bool = Field(
        description="Whether the item was already hidden when this mutation was applied",
    )
    generation: int = Field(description="Store refresh generation the mutation belongs to")


class SimilarityPrompt(BaseModel):
    """Offer to archive other visible items from the same sender domain."""

    domain: str = Field(description="Shared sender domain")
    candidates: list[Item] = Field(default_factory=list, description="Items that would be archived")


class MutationNotice(BaseModel):
    """Transient, user-facing notice that a mutation was rolled back."""

    item_id: str = Field(description="Item whose mutation failed")
    kind: MutationKind = Field(description="Triage action that failed")
    error: str = Field(description="Error description")


__all__ = [
    "Item",
    "Message",
    "MutationKind",
    "MutationNotice",
    "PendingMutation",
    "RecipientSet",
    "ReplyDraft",
    "SimilarityPrompt",
    "Thread",
]
