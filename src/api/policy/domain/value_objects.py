"""Value objects for the Policy bounded context.

Value objects are immutable descriptors of the rules a builder accumulates
and of the policy document it compiles. Equality is based on attribute values.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from shared_kernel.authorization.types import (
    INVOKE_ACTION,
    POLICY_VERSION,
    WILDCARD,
    Effect,
)

# Operator -> condition key -> value (a string or a list of strings in IAM).
ConditionMap: TypeAlias = dict[str, dict[str, Any]]

# Scalar types the enforcement point accepts as context values.
ContextValue: TypeAlias = str | int | float | bool


def _or_wildcard(value: str | None) -> str:
    if value is None or not value.strip():
        return WILDCARD
    return value


@dataclass(frozen=True)
class ApiOptions:
    """Scoping options for the ARNs a builder generates.

    Each option that is missing or blank resolves to the wildcard "*". This
    widens rather than narrows the policy: an unset stage matches every stage
    of the API. Callers that want a narrow policy must set all three.
    """

    region: str | None = None
    api_id: str | None = None
    stage: str | None = None

    @property
    def resolved_region(self) -> str:
        return _or_wildcard(self.region)

    @property
    def resolved_api_id(self) -> str:
        return _or_wildcard(self.api_id)

    @property
    def resolved_stage(self) -> str:
        return _or_wildcard(self.stage)


@dataclass(frozen=True)
class Condition:
    """One condition operator with its key/value pairs.

    Example:
        Condition(ConditionOperator.IP_ADDRESS, {ConditionKey.SOURCE_IP: "10.0.0.0/8"})
    """

    operator: str
    key_values: Mapping[str, Any]


@dataclass(frozen=True)
class Rule:
    """A registered allow/deny rule for one method ARN.

    Attributes:
        effect: Allow or Deny
        verb: HTTP verb or "*"
        resource_arn: Fully qualified method ARN
        conditions: Condition block, or None for an unconditioned rule
    """

    effect: Effect
    verb: str
    resource_arn: str
    conditions: ConditionMap | None = None

    @property
    def is_conditional(self) -> bool:
        return bool(self.conditions)


@dataclass(frozen=True)
class Statement:
    """One compiled policy statement.

    Statements without a condition may batch several resources. A statement
    with a condition always carries exactly one resource.
    """

    effect: Effect
    resources: tuple[str, ...]
    condition: ConditionMap | None = None
    action: str = INVOKE_ACTION

    def to_dict(self) -> dict[str, Any]:
        """Render the statement in policy document wire format."""
        result: dict[str, Any] = {
            "Action": self.action,
            "Effect": str(self.effect),
            "Resource": list(self.resources),
        }
        if self.condition is not None:
            result["Condition"] = copy.deepcopy(self.condition)
        return result


@dataclass(frozen=True)
class PolicyDocument:
    """Compiled policy document.

    Attributes:
        statements: Compiled statements followed by custom statements.
            Custom statements are raw mappings emitted verbatim.
        version: Policy language version
    """

    statements: tuple[Statement | Mapping[str, Any], ...]
    version: str = POLICY_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Render the document in wire format."""
        return {
            "Version": self.version,
            "Statement": [
                s.to_dict() if isinstance(s, Statement) else copy.deepcopy(dict(s))
                for s in self.statements
            ],
        }


@dataclass(frozen=True)
class AuthorizationResult:
    """The authorizer response handed to the enforcement point.

    Attributes:
        principal_id: Principal the policy is issued for
        policy_document: Compiled policy document
        context: Flat scalar mapping exposed as $context.authorizer.<key>,
            or None when no context was set
    """

    principal_id: str
    policy_document: PolicyDocument
    context: dict[str, ContextValue] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON-serializable authorizer response.

        The "context" key is only present when a context was set.
        """
        result: dict[str, Any] = {
            "principalId": self.principal_id,
            "policyDocument": self.policy_document.to_dict(),
        }
        if self.context is not None:
            result["context"] = dict(self.context)
        return result
