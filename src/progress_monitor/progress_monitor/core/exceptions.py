class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a role or visit precondition is not met."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ExternalServiceError(DomainError):
    """Raised when a collaborator service fails or answers garbage."""


class FaceMatchServiceError(ExternalServiceError):
    """Face comparison service failed. Never retried."""


class PhotoAuditError(ExternalServiceError):
    """Photo audit service failed. Advisory only, callers swallow it."""


class StorageError(ExternalServiceError):
    """Object storage upload failed."""
