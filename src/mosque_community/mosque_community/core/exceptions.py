class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable machine-readable ``kind`` and the HTTP
    status the API layer answers with.
    """

    kind = "domain_error"
    http_status = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.kind


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation_error"
    http_status = 400


class AuthenticationError(DomainError):
    """Raised when credentials or the bearer token are invalid."""

    kind = "authentication_error"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "authorization_error"
    http_status = 403


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    kind = "not_found"
    http_status = 404


class ConflictError(DomainError):
    """Raised on invalid state transitions and duplicate unique keys."""

    kind = "conflict"
    http_status = 409


class InfrastructureError(DomainError):
    """Raised when the database or another backing service fails."""

    kind = "infrastructure_error"
    http_status = 500
