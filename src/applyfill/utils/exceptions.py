"""
Custom exceptions for ApplyFill.
"""


class ApplyFillError(Exception):
    """Base class for ApplyFill errors."""

    pass


class InvalidRequestError(ApplyFillError):
    """Raised when a call violates a precondition (e.g., missing user id)."""

    pass


class AiAssistantError(ApplyFillError):
    """Raised when the AI assistant returns an unusable reply."""

    pass
