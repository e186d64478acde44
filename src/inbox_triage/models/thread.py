"""Conversation models: a fetched thread and its messages.

Both models are frozen. A thread is rebuilt from the bridge on every fetch
and never edited in place, so views can hold on to one safely.
"""

from __future__ import annotations

from datetime import datetime
from email.utils import parsedate_to_datetime

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """A single decoded message inside a thread."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", description="Message ID")

    # Raw header strings. Free text such as 'Alice <a@x.com>, b@y.com'.
    from_raw: str = Field(default="", description="Raw From header")
    to_raw: str = Field(default="", description="Raw To header")
    cc_raw: str = Field(default="", description="Raw Cc header")

    date: str = Field(default="", description="Date header as sent by the bridge")
    subject: str = Field(default="", description="Subject header")
    body_text: str = Field(default="", description="Plain-text body")
    body_markup: str | None = Field(default=None, description="HTML body, if any")
    is_self: bool = Field(default=False, description="Whether the active account sent it")

    @property
    def parsed_date(self) -> datetime | None:
        if not self.date:
            return None
        try:
            return parsedate_to_datetime(self.date)
        except (TypeError, ValueError, OverflowError):
            pass
        try:
            return datetime.fromisoformat(self.date.replace(" ", "T", 1))
        except ValueError:
            return None


class Thread(BaseModel):
    """An ordered (oldest first) conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Thread ID")
    messages: tuple[Message, ...] = Field(default=(), description="Messages, chronological")
    message_count: int = Field(default=0, description="Aggregate message count from the bridge")
    has_unsubscribe: bool = Field(default=False, description="Whether an unsubscribe option exists")

    @property
    def last_message(self) -> Message | None:
        """Most recent message, or None for an empty thread."""
        return self.messages[-1] if self.messages else None
