"""Custom exceptions for the calendar agent."""

from typing import Optional

from calhook.constants import NOT_AUTHENTICATED_MESSAGE


class CalhookError(Exception):
    """Base exception for all calendar agent errors."""

    pass


class NotAuthenticatedError(CalhookError):
    """
    Raised when a calendar operation is attempted before any token set
    has been stored for the calling identity.
    """

    def __init__(self, user_id: str, message: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message or NOT_AUTHENTICATED_MESSAGE)


class NotConfiguredError(CalhookError):
    """Raised when an optional integration is used without its settings."""

    def __init__(self, integration: str, message: Optional[str] = None):
        self.integration = integration
        super().__init__(message or f"{integration} integration not configured")


class InterpreterTimeoutError(CalhookError):
    """Raised when the language service does not answer within the timeout."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Language service timed out after {timeout_seconds:g} seconds")
