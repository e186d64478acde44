"""Custom exceptions for Inbox Triage."""


class InboxTriageError(Exception):
    """Base exception for all Inbox Triage errors."""


class BridgeAPIError(InboxTriageError):
    """Exception raised when a bridge request fails or returns a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(InboxTriageError):
    """Exception raised for configuration related errors."""


class ValidationError(InboxTriageError):
    """Exception raised for invalid caller input."""
