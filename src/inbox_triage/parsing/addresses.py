"""Address extraction from free-text header values.

Headers arrive already decoded but otherwise raw ('Alice <a@x.com>, b@y.com',
sometimes with stray quoting), so addresses are pulled out by pattern rather
than by a strict RFC 5322 parser. Comparisons are always case-folded.
"""

from __future__ import annotations

import re

ADDRESS_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_ANGLE_RE = re.compile(r"<([^>]+)>")
_NAME_RE = re.compile(r"^([^<]+)")
_DOMAIN_RE = re.compile(r"@([a-zA-Z0-9.-]+)")


def parse_addresses(header: object) -> list[str]:
    """Return every address in a header, lower-cased, first occurrence order."""
    if not isinstance(header, str) or not header:
        return []

    seen: list[str] = []
    for match in ADDRESS_RE.findall(header):
        addr = match.lower()
        if addr not in seen:
            seen.append(addr)
    return seen


def extract_email(from_header: object) -> str:
    """Return the sender address of a From header, lower-cased.

    Prefers the bracketed part, falls back to the first address-looking
    token, and finally to the stripped header itself.
    """
    if not isinstance(from_header, str):
        return ""

    bracketed = _ANGLE_RE.search(from_header)
    if bracketed:
        return bracketed.group(1).strip().lower()

    found = ADDRESS_RE.search(from_header)
    if found:
        return found.group(0).lower()
    return from_header.strip().lower()


def extract_name(from_header: object) -> str:
    """Display name of a From header, or the header itself when there is none."""
    if not isinstance(from_header, str):
        return ""
    match = _NAME_RE.match(from_header)
    name = match.group(1).strip().strip('"').strip() if match else ""
    return name or from_header.strip()


def extract_domain(sender: object) -> str | None:
    """Lower-cased domain of the first address in ``sender``."""
    if not isinstance(sender, str):
        return None
    match = _DOMAIN_RE.search(sender)
    if not match:
        return None
    # Trailing dots come from sentence punctuation, not the domain.
    domain = match.group(1).rstrip(".").lower()
    return domain or None
