"""Domain layer for the Policy bounded context."""

from policy.domain.builder import PolicyBuilder
from policy.domain.value_objects import (
    ApiOptions,
    AuthorizationResult,
    Condition,
    PolicyDocument,
    Rule,
    Statement,
)

__all__ = [
    "PolicyBuilder",
    "ApiOptions",
    "AuthorizationResult",
    "Condition",
    "PolicyDocument",
    "Rule",
    "Statement",
]
