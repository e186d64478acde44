"""Same-domain lookup behind the "archive similar" suggestion."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable

from inbox_triage.config import DEFAULT_SKIP_DOMAINS
from inbox_triage.models import Item
from inbox_triage.parsing.addresses import extract_domain

PUBLIC_MAIL_DOMAINS = frozenset(DEFAULT_SKIP_DOMAINS)


def find_similar(
    item: Item,
    visible_items: Iterable[Item],
    excluded: Collection[str],
    *,
    domain_of: Callable[[str], str | None] = extract_domain,
    skip_domains: Collection[str] = PUBLIC_MAIL_DOMAINS,
) -> list[Item]:
    """Other visible items whose sender shares ``item``'s domain.

    Args:
        item: The item just archived or ignored.
        visible_items: Candidate items.
        excluded: IDs already hidden; never returned.
        domain_of: Maps a sender header to a lower-cased domain.
        skip_domains: Public providers for which batching is not offered.

    Returns:
        Matching items in ``visible_items`` order. Empty when the domain is
        missing or public.
    """
    domain = domain_of(item.sender)
    if not domain or domain.lower() in {d.lower() for d in skip_domains}:
        return []

    domain = domain.lower()
    matches = []
    for candidate in visible_items:
        if candidate.id == item.id or candidate.id in excluded:
            continue
        other = domain_of(candidate.sender)
        if other is not None and other.lower() == domain:
            matches.append(candidate)
    return matches
