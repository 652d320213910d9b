"""Authorization primitives for API Gateway authorizer policies.

This module provides shared authorization types, errors, and the resource
locator parser used across bounded contexts.
"""

from shared_kernel.authorization.exceptions import (
    AuthorizationError,
    FormatError,
    ValidationError,
)
from shared_kernel.authorization.resource_reference import ResourceReference
from shared_kernel.authorization.types import (
    INVOKE_ACTION,
    POLICY_VERSION,
    WILDCARD,
    ConditionKey,
    ConditionOperator,
    Effect,
    HttpVerb,
    format_resource_arn,
)

__all__ = [
    "AuthorizationError",
    "FormatError",
    "ValidationError",
    "ResourceReference",
    "HttpVerb",
    "Effect",
    "ConditionOperator",
    "ConditionKey",
    "INVOKE_ACTION",
    "POLICY_VERSION",
    "WILDCARD",
    "format_resource_arn",
]
