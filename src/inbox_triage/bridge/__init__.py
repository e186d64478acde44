"""Client for the remote assistant bridge."""

from .client import MAIL_ACTIONS, BridgeClient

__all__ = ["BridgeClient", "MAIL_ACTIONS"]
