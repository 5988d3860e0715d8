class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when a required field is missing or malformed."""


class SequenceError(DomainError):
    """Raised when a punch violates the temporal order of stored records."""


class ScheduleResolutionError(DomainError):
    """Raised when a time-of-day value cannot be parsed."""


class PersistenceError(DomainError):
    """Opaque failure reported by a repository."""


class ConflictError(DomainError):
    """Raised when a write collides with an existing unique value."""
