"""PolicyBuilder for API Gateway authorizer responses."""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import unquote

from policy.domain.observability import (
    DefaultPolicyBuilderProbe,
    PolicyBuilderProbe,
)
from policy.domain.value_objects import (
    ApiOptions,
    AuthorizationResult,
    Condition,
    ConditionMap,
    ContextValue,
    PolicyDocument,
    Rule,
    Statement,
)
from shared_kernel.authorization.exceptions import ValidationError
from shared_kernel.authorization.resource_reference import ResourceReference
from shared_kernel.authorization.types import (
    DEFAULT_PARTITION,
    DEFAULT_SERVICE,
    WILDCARD,
    Effect,
    HttpVerb,
    format_resource_arn,
)
from shared_kernel.observability_context import ObservationContext

PATH_PATTERN = re.compile(r"^[/.a-zA-Z0-9\-*]+$")

_VERBS = frozenset(verb.value for verb in HttpVerb)


class PolicyBuilder:
    """Accumulates allowed and denied methods and compiles an authorizer policy.

    One builder serves one authorization decision. Rules are validated when
    they are registered; build() compiles them into a PolicyDocument where:
    - all unconditioned rules of an effect share one statement
    - every conditioned rule gets its own single-resource statement
    - statements are ordered Allow, then Deny, then custom statements

    Region, API id and stage each default to "*" when not supplied. This
    default is permissive: the generated ARNs then match every region, API or
    stage of the account.

    Once build() has returned, the builder is considered built and refuses
    further registrations. build() itself can be called again and recompiles
    the same result from the accumulated rules.
    """

    def __init__(
        self,
        principal_id: str,
        account_id: str,
        options: ApiOptions | None = None,
        *,
        partition: str = DEFAULT_PARTITION,
        service: str = DEFAULT_SERVICE,
        probe: PolicyBuilderProbe | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            principal_id: Unique identifier of the calling principal
            account_id: Account that owns the API
            options: Region, API id and stage to scope ARNs to
            partition: AWS partition used in ARNs
            service: Service namespace used in ARNs
            probe: Optional domain probe for observability
        """
        options = options or ApiOptions()
        self.principal_id = principal_id
        self.account_id = account_id
        self.partition = partition
        self.service = service
        self.region = options.resolved_region
        self.api_id = options.resolved_api_id
        self.stage = options.resolved_stage
        self._probe = probe or DefaultPolicyBuilderProbe().with_context(
            ObservationContext(principal_id=principal_id, api_id=self.api_id)
        )

        self._rules: list[Rule] = []
        self._custom_statements: list[dict[str, Any]] = []
        self._context: dict[str, ContextValue] | None = None
        self._built = False

    @classmethod
    def from_resource_reference(
        cls,
        principal_id: str,
        reference: ResourceReference,
        probe: PolicyBuilderProbe | None = None,
    ) -> PolicyBuilder:
        """Create a builder scoped to the API of a parsed resource locator.

        Args:
            principal_id: Unique identifier of the calling principal
            reference: Parsed locator of the incoming request
            probe: Optional domain probe for observability

        Returns:
            PolicyBuilder using the reference's partition, service, region,
            account, API id and stage
        """
        return cls(
            principal_id=principal_id,
            account_id=reference.account_id,
            options=ApiOptions(
                region=reference.region,
                api_id=reference.api_id,
                stage=reference.stage,
            ),
            partition=reference.partition,
            service=reference.service,
            probe=probe,
        )

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def allow_method(self, verb: HttpVerb | str, path: str) -> None:
        """Allow an API method (verb + resource path), e.g. ("GET", "/pets")."""
        self._add_rule(Effect.ALLOW, verb, path, None)

    def deny_method(self, verb: HttpVerb | str, path: str) -> None:
        """Deny an API method (verb + resource path)."""
        self._add_rule(Effect.DENY, verb, path, None)

    def allow_method_with_conditions(
        self,
        verb: HttpVerb | str,
        path: str,
        conditions: Mapping[str, Mapping[str, Any]] | Iterable[Condition],
    ) -> None:
        """Allow an API method only when the given IAM conditions hold.

        Args:
            verb: HTTP verb or "*"
            path: Resource path, e.g. "/pets/*"
            conditions: Mapping of operator to key/value pairs, or a sequence
                of Condition objects. Each operator may appear only once and must
                name at least one condition key.

        Raises:
            ValidationError: If the verb, path or conditions are invalid
        """
        self._add_rule(Effect.ALLOW, verb, path, conditions)

    def deny_method_with_conditions(
        self,
        verb: HttpVerb | str,
        path: str,
        conditions: Mapping[str, Mapping[str, Any]] | Iterable[Condition],
    ) -> None:
        """Deny an API method when the given IAM conditions hold.

        See allow_method_with_conditions for the accepted condition formats.
        """
        self._add_rule(Effect.DENY, verb, path, conditions)

    def allow_all_methods(self) -> None:
        """Allow every verb on every resource of the scoped API."""
        self._add_rule(Effect.ALLOW, HttpVerb.ALL, WILDCARD, None)

    def deny_all_methods(self) -> None:
        """Deny every verb on every resource of the scoped API."""
        self._add_rule(Effect.DENY, HttpVerb.ALL, WILDCARD, None)

    def add_statement(self, statement: Mapping[str, Any]) -> None:
        """Append a raw statement to the policy verbatim.

        This is an escape hatch for statements the structured API cannot
        express. The statement is NOT validated: a malformed statement is
        emitted as-is and only rejected by the enforcement point.
        """
        self._ensure_accumulating()
        self._custom_statements.append(copy.deepcopy(dict(statement)))
        self._probe.statement_appended()

    def with_context(self, context: Mapping[str, ContextValue]) -> None:
        """Replace the authorizer context exposed as $context.authorizer.<key>.

        The previous context is discarded, not merged.

        Raises:
            ValidationError: If a key is not a string, a value is not a
                string, number or boolean, or a number is NaN or infinite
        """
        self._ensure_accumulating()
        for key, value in context.items():
            if not isinstance(key, str):
                raise ValidationError(f"Context keys must be strings, got {key!r}")
            if not isinstance(value, (str, int, float, bool)):
                raise ValidationError(
                    f"Invalid context value for {key!r}: {type(value).__name__}. "
                    "Only strings, numbers and booleans are allowed"
                )
            if isinstance(value, float) and not math.isfinite(value):
                raise ValidationError(
                    f"Invalid context value for {key!r}: {value}. Numbers must be finite"
                )
        self._context = dict(context)

    def build(self) -> AuthorizationResult:
        """Compile the accumulated rules into an authorizer response.

        Returns:
            AuthorizationResult holding copies of all accumulated state

        Raises:
            ValidationError: If no rule and no custom statement was registered
        """
        if not self._rules and not self._custom_statements:
            self._probe.build_rejected(reason="no statements defined")
            raise ValidationError("No statements defined for the policy")

        statements: list[Statement | dict[str, Any]] = []
        statements.extend(self._statements_for_effect(Effect.ALLOW))
        statements.extend(self._statements_for_effect(Effect.DENY))
        statements.extend(copy.deepcopy(self._custom_statements))

        self._built = True
        self._probe.policy_built(
            statement_count=len(statements),
            custom_statement_count=len(self._custom_statements),
        )

        return AuthorizationResult(
            principal_id=self.principal_id,
            policy_document=PolicyDocument(statements=tuple(statements)),
            context=dict(self._context) if self._context is not None else None,
        )

    def _statements_for_effect(self, effect: Effect) -> list[Statement]:
        """Batch unconditioned rules of an effect; one statement per conditioned rule."""
        rules = [rule for rule in self._rules if rule.effect == effect]

        batched = tuple(rule.resource_arn for rule in rules if not rule.is_conditional)
        statements: list[Statement] = []
        if batched:
            statements.append(Statement(effect=effect, resources=batched))

        for rule in rules:
            if rule.is_conditional:
                statements.append(
                    Statement(
                        effect=effect,
                        resources=(rule.resource_arn,),
                        condition=copy.deepcopy(rule.conditions),
                    )
                )
        return statements

    def _add_rule(
        self,
        effect: Effect,
        verb: HttpVerb | str,
        path: str,
        conditions: Mapping[str, Mapping[str, Any]] | Iterable[Condition] | None,
    ) -> None:
        self._ensure_accumulating()
        try:
            normalized_verb = self._validate_verb(verb)
            self._validate_path(path)
            condition_map = self._normalize_conditions(conditions)
        except ValidationError as e:
            self._probe.rule_rejected(
                effect=str(effect), verb=str(verb), path=str(path), reason=str(e)
            )
            raise

        rule = Rule(
            effect=effect,
            verb=normalized_verb,
            resource_arn=self._resource_arn(normalized_verb, path),
            conditions=condition_map,
        )
        self._rules.append(rule)
        self._probe.rule_registered(
            effect=str(effect),
            verb=rule.verb,
            resource_arn=rule.resource_arn,
            conditional=rule.is_conditional,
        )

    def _resource_arn(self, verb: str, path: str) -> str:
        # Only one leading slash is dropped; inner slashes are sub-resources.
        resource_path = path[1:] if path.startswith("/") else path
        return format_resource_arn(
            partition=self.partition,
            service=self.service,
            region=self.region,
            account_id=self.account_id,
            api_id=self.api_id,
            stage=self.stage,
            verb=verb,
            resource_path=resource_path,
        )

    def _ensure_accumulating(self) -> None:
        if self._built:
            raise ValidationError("Policy has already been built; create a new builder")

    @staticmethod
    def _validate_verb(verb: HttpVerb | str) -> str:
        if not isinstance(verb, str) or verb not in _VERBS:
            raise ValidationError(
                f"Invalid HTTP verb {verb}. Allowed verbs: {', '.join(sorted(_VERBS))}"
            )
        return str(HttpVerb(verb))

    @staticmethod
    def _validate_path(path: str) -> None:
        if not isinstance(path, str):
            raise ValidationError(f"Invalid resource path: {path!r}")
        decoded = unquote(path)
        if not PATH_PATTERN.fullmatch(decoded):
            raise ValidationError(
                f"Invalid resource path: {decoded}. Path should match {PATH_PATTERN.pattern}"
            )

    @staticmethod
    def _normalize_conditions(
        conditions: Mapping[str, Mapping[str, Any]] | Iterable[Condition] | None,
    ) -> ConditionMap | None:
        if conditions is None:
            return None

        if isinstance(conditions, Mapping):
            entries = [(operator, key_values) for operator, key_values in conditions.items()]
        else:
            entries = []
            for condition in conditions:
                if not isinstance(condition, Condition):
                    raise ValidationError(
                        f"Expected Condition, got {type(condition).__name__}"
                    )
                entries.append((condition.operator, condition.key_values))

        result: ConditionMap = {}
        for operator, key_values in entries:
            name = str(operator)
            if name in result:
                raise ValidationError(
                    f"Condition operators must be unique per statement: {name}"
                )
            if not isinstance(key_values, Mapping):
                raise ValidationError(
                    f"Condition {name} must map condition keys to values"
                )
            if not key_values:
                raise ValidationError(f"Condition {name} has no condition keys")
            result[name] = {str(key): copy.deepcopy(value) for key, value in key_values.items()}

        return result or None
