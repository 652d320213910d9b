"""Exceptions raised to the caller of the authorizer boundary."""

from shared_kernel.authorization.exceptions import AuthorizationError


class UnauthorizedError(AuthorizationError):
    """Generic outward signal that the request is not authorized.

    API Gateway maps an authorizer failure with the message "Unauthorized"
    to a 401 response. The underlying cause is chained, never exposed.
    """

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)
