class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class PolicyViolation(ValidationError):
    """Raised when a leave request breaks a named policy rule."""

    def __init__(self, message: str, rule: str):
        super().__init__(message)
        self.rule = rule
