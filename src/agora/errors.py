from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class SessionNotFoundError(NotFoundError):
    """Raised when no session matches the requested code."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Session '{code}' not found")
        self.code = code


class ActionNotFoundError(NotFoundError):
    """Raised when a session holds no action with the requested action_id."""

    def __init__(self, code: str, action_id: int) -> None:
        super().__init__(f"Action {action_id} not found in session '{code}'")
        self.code = code
        self.action_id = action_id


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ServiceError(Exception):
    """Base class for engine failures that are not caused by bad input."""


class ExhaustedRetriesError(ServiceError):
    """Raised when a bounded retry loop runs out of attempts."""


class StoreError(ServiceError):
    """Raised when the underlying document store fails."""


class DuplicateCodeError(StoreError):
    """Raised when inserting a session whose code is already taken."""


class ConcurrentModificationError(ServiceError):
    """Raised when a session keeps changing under a writer past the retry bound."""


class PersistenceVerificationError(ServiceError):
    """Raised when a write reported success but the data is absent on read-back."""
