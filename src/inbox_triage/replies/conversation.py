"""Display-ready conversation built from a raw thread."""

from __future__ import annotations

from pydantic import BaseModel, Field

from inbox_triage.models import Message, Thread
from inbox_triage.parsing.addresses import extract_email, extract_name
from inbox_triage.parsing.quotes import strip_quoted_markup, strip_quoted_text


class ConversationEntry(BaseModel):
    """One message as shown in the conversation view."""

    message_id: str = Field(description="Message ID")
    sender_name: str = Field(description="Display name of the sender")
    sender_email: str = Field(description="Sender address")
    date: str = Field(description="Date header")
    is_self: bool = Field(description="Whether the active account sent it")
    body: str = Field(description="Body with the quoted chain removed")
    is_markup: bool = Field(description="Whether body is HTML")


def _display(message: Message) -> tuple[str, bool]:
    if message.body_markup:
        stripped = strip_quoted_markup(message.body_markup)
        if stripped:
            return stripped, True
    return strip_quoted_text(message.body_text), False


def display_body(message: Message) -> str:
    """Stripped markup body when it has content, else the stripped plain body."""
    return _display(message)[0]


def render_conversation(thread: Thread) -> list[ConversationEntry]:
    entries = []
    for message in thread.messages:
        body, is_markup = _display(message)
        entries.append(
            ConversationEntry(
                message_id=message.id,
                sender_name=extract_name(message.from_raw),
                sender_email=extract_email(message.from_raw),
                date=message.date,
                is_self=message.is_self,
                body=body,
                is_markup=is_markup,
            )
        )
    return entries
