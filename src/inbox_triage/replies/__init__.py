"""Reply preparation: recipients, drafts, and the readable conversation."""

from .compose import build_reply_draft, reply_subject
from .conversation import ConversationEntry, display_body, render_conversation
from .recipients import offers_reply_all, resolve_recipients, toggle_reply_all

__all__ = [
    "ConversationEntry",
    "build_reply_draft",
    "display_body",
    "offers_reply_all",
    "render_conversation",
    "reply_subject",
    "resolve_recipients",
    "toggle_reply_all",
]
