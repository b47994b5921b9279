class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class CalendarLookupError(DomainError):
    """Raised when holiday / working-day status cannot be determined.

    A day run cannot decide anything safely without it, so this one aborts the batch.
    """
