"""Inbox triage: optimistic local state and batch suggestions."""

from .similar import PUBLIC_MAIL_DOMAINS, find_similar
from .store import OptimisticMutationStore, TriageBackend

__all__ = ["OptimisticMutationStore", "PUBLIC_MAIL_DOMAINS", "TriageBackend", "find_similar"]
