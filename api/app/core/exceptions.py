"""
Custom exceptions for the application.
"""


class StudyDeckException(Exception):
    """Base exception for all Study Deck application exceptions."""
    pass


class InvalidInputError(StudyDeckException):
    """Raised when input is malformed (e.g., unknown difficulty, card index out of range)."""
    pass


class NotFoundError(StudyDeckException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(StudyDeckException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class ConcurrencyConflictError(ConflictError):
    """Raised when a concurrent write changed a review row between read and update."""
    pass


class AuthorizationError(StudyDeckException):
    """Raised when a user accesses a resource they do not own."""
    pass


class StorageError(StudyDeckException):
    """Raised when the database fails; the transaction has been rolled back."""
    pass
