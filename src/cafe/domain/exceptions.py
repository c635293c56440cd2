"""Domain-level exceptions.

All failures a caller can see are subclasses of DomainException so the CLI
layer can catch them uniformly and display a single human-readable message.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated before any write."""


class NotFoundError(DomainException):
    """A referenced record does not exist."""


class ConflictError(DomainException):
    """The operation is blocked by the current state of another record."""


class StoreError(DomainException):
    """The underlying storage is unavailable or a write failed."""
