"""Quoted-chain removal for plain-text and HTML message bodies.

Every message in a thread usually carries a copy of the conversation so far.
These helpers cut a body down to what its author actually wrote. They are
heuristics: when nothing matches, the input is kept whole. Nothing here
raises.
"""

from __future__ import annotations

import re

# Plain-text signatures of a quoted chain, tried per line in this order.
ON_WROTE_RE = re.compile(r"^On .+(wrote|said|writes):?\s*$", re.IGNORECASE)
FORWARD_SEPARATOR_RE = re.compile(r"^-{2,}\s*(Original Message|Forwarded message)", re.IGNORECASE)
FROM_HEADER_RE = re.compile(r"^From:\s+.+@")
HEADER_BLOCK_RE = re.compile(r"Sent:|To:|Subject:", re.IGNORECASE)
IMAGE_PLACEHOLDER_RE = re.compile(r"^\[image:.*\]")

# A From: line only counts as a quoted header block below the first few lines,
# where an author's own forwarded header is unlikely.
FROM_HEADER_MIN_INDEX = 4
HEADER_LOOKAHEAD = 4
QUOTE_RUN_MIN = 3

_SIGNATURE_SEPARATORS = {"", "--", "—"}

# Markup sanitisation.
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_EVENT_DQ_RE = re.compile(r"\son\w+\s*=\s*\"[^\"]*\"", re.IGNORECASE)
_EVENT_SQ_RE = re.compile(r"\son\w+\s*=\s*'[^']*'", re.IGNORECASE)
_EVENT_BARE_RE = re.compile(r"\son\w+\s*=\s*[^\s>\"']+", re.IGNORECASE)
_JS_URI_RE = re.compile(r"javascript:", re.IGNORECASE)
_CID_IMAGE_RE = re.compile(r"<img[^>]*src=[\"']cid:[^\"']*[\"'][^>]*>", re.IGNORECASE)

EMBEDDED_IMAGE_PLACEHOLDER = '<span class="embedded-image">[embedded image]</span>'

# Markup signatures of a quoted chain. Everything from the match onwards goes.
QUOTE_CONTAINER_RES = (
    # Generic "quote" class container (gmail_quote, yahoo_quoted, ...).
    re.compile(r"<div[^>]*class=[\"'][^\"']*quote[^\"']*[\"'][^>]*>", re.IGNORECASE),
    # Cited blockquote (Apple Mail, Thunderbird).
    re.compile(r"<blockquote[^>]*type=[\"']cite[\"'][^>]*>", re.IGNORECASE),
    # Thunderbird's "On ... wrote:" prefix container.
    re.compile(r"<div[^>]*class=[\"']moz-cite-prefix[\"'][^>]*>", re.IGNORECASE),
    # Outlook's reply separator.
    re.compile(r"<div[^>]*style=[\"']border:none;\s*border-top:solid #[A-Fa-f0-9]+ 1\.0pt", re.IGNORECASE),
    # Horizontal rule followed by a bold "From:" paragraph.
    re.compile(r"<hr[^>]*>\s*<p[^>]*>\s*<b>\s*From:\s*</b>", re.IGNORECASE),
)


def _quoted_chain_start(lines: list[str]) -> int | None:
    for i, line in enumerate(lines):
        trimmed = line.strip()

        if ON_WROTE_RE.match(trimmed):
            return i

        if FORWARD_SEPARATOR_RE.match(trimmed):
            return i

        if i >= FROM_HEADER_MIN_INDEX and FROM_HEADER_RE.match(trimmed):
            following = "\n".join(lines[i + 1 : i + 1 + HEADER_LOOKAHEAD])
            if HEADER_BLOCK_RE.search(following):
                return i

        if i > 0 and IMAGE_PLACEHOLDER_RE.match(trimmed) and "wrote:" in lines[i - 1]:
            return i

        if trimmed.startswith(">"):
            run = 0
            for candidate in lines[i : i + QUOTE_RUN_MIN]:
                if not candidate.strip().startswith(">"):
                    break
                run += 1
            if run >= QUOTE_RUN_MIN:
                return i

    return None


def strip_quoted_text(body: object) -> str:
    """Cut a plain-text body at the start of its quoted or forwarded chain.

    Trailing blank lines and bare signature separators are dropped, and the
    result is whitespace-trimmed. Non-string input yields an empty string.

    Args:
        body: Plain-text message body.

    Returns:
        The newly authored part of the body.
    """
    if not isinstance(body, str) or not body:
        return ""

    lines = body.split("\n")
    cut = _quoted_chain_start(lines)
    kept = lines if cut is None else lines[:cut]

    while kept and kept[-1].strip() in _SIGNATURE_SEPARATORS:
        kept.pop()

    return "\n".join(kept).strip()


def sanitize_markup(html: object) -> str:
    """Remove active content from an HTML body.

    Drops script and style blocks, inline event-handler attributes and
    ``javascript:`` URIs, and swaps unresolvable ``cid:`` images for a
    placeholder.
    """
    if not isinstance(html, str) or not html:
        return ""

    cleaned = _SCRIPT_RE.sub("", html)
    cleaned = _STYLE_RE.sub("", cleaned)
    cleaned = _EVENT_DQ_RE.sub("", cleaned)
    cleaned = _EVENT_SQ_RE.sub("", cleaned)
    cleaned = _EVENT_BARE_RE.sub("", cleaned)
    cleaned = _JS_URI_RE.sub("", cleaned)
    return _CID_IMAGE_RE.sub(EMBEDDED_IMAGE_PLACEHOLDER, cleaned)


def strip_quoted_markup(html: object) -> str:
    """Sanitize an HTML body and cut it at its quoted-chain container.

    When several signatures are present the earliest one wins. Without any
    signature the sanitized input is returned unchanged.
    """
    cleaned = sanitize_markup(html)
    if not cleaned:
        return ""

    starts = [m.start() for m in (r.search(cleaned) for r in QUOTE_CONTAINER_RES) if m]
    if not starts:
        return cleaned
    return cleaned[: min(starts)].strip()
