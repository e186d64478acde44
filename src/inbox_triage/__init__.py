"""Inbox Triage - the inbox-processing core of a personal mission-control dashboard.

This package reconstructs readable conversations from raw email threads,
derives Reply/Reply-All recipients, and keeps an optimistic local view of
triage actions against a remote assistant bridge.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from inbox_triage.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
