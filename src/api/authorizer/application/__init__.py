"""Application layer for the Authorizer bounded context."""

from authorizer.application.events import AuthorizerEvent, PayloadVersion
from authorizer.application.exceptions import UnauthorizedError
from authorizer.application.services import (
    AuthorizerService,
    grant_all,
    policy_builder_from_event,
)

__all__ = [
    "AuthorizerEvent",
    "AuthorizerService",
    "PayloadVersion",
    "UnauthorizedError",
    "grant_all",
    "policy_builder_from_event",
]
