"""Application errors raised by services and mapped to HTTP responses."""


class ServiceError(Exception):
    """Base error carrying a machine-readable code."""

    status_code = 400

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(ServiceError):
    """Raised when request data fails validation."""


class NotFoundError(ServiceError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class ConflictError(ServiceError):
    """Raised when a write violates a database constraint."""
