"""Exceptions for authorizer policy operations."""


class AuthorizationError(Exception):
    """Base exception for authorization errors."""

    pass


class FormatError(AuthorizationError):
    """Raised when a resource locator string cannot be parsed."""

    pass


class ValidationError(AuthorizationError):
    """Raised when a rule, context, or build request is invalid."""

    pass
