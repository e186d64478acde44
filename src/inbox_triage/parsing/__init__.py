"""Parsing helpers: addresses, quoted-chain stripping, bridge payloads."""

from .addresses import extract_domain, extract_email, extract_name, parse_addresses
from .quotes import sanitize_markup, strip_quoted_markup, strip_quoted_text

__all__ = [
    "extract_domain",
    "extract_email",
    "extract_name",
    "parse_addresses",
    "sanitize_markup",
    "strip_quoted_markup",
    "strip_quoted_text",
]
