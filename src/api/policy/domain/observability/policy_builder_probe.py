"""Observability probes for the PolicyBuilder.

Domain probes for the policy builder following Domain Oriented Observability
pattern. Probes emit structured logs with domain-specific context for rule
registration and policy compilation.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PolicyBuilderProbe(Protocol):
    """Protocol for policy builder observability probes."""

    def rule_registered(
        self,
        effect: str,
        verb: str,
        resource_arn: str,
        conditional: bool,
    ) -> None:
        """Probe emitted when an allow/deny rule is registered.

        Args:
            effect: "Allow" or "Deny"
            verb: The HTTP verb or "*"
            resource_arn: The generated method ARN
            conditional: Whether the rule carries a condition block
        """
        ...

    def rule_rejected(
        self,
        effect: str,
        verb: str,
        path: str,
        reason: str,
    ) -> None:
        """Probe emitted when a rule fails validation.

        Args:
            effect: "Allow" or "Deny"
            verb: The verb as given by the caller
            path: The resource path as given by the caller
            reason: Why the rule was rejected
        """
        ...

    def statement_appended(self) -> None:
        """Probe emitted when a raw custom statement is appended."""
        ...

    def policy_built(
        self,
        statement_count: int,
        custom_statement_count: int,
    ) -> None:
        """Probe emitted when a policy document is compiled.

        Args:
            statement_count: Total statements in the document
            custom_statement_count: How many of them are raw custom statements
        """
        ...

    def build_rejected(self, reason: str) -> None:
        """Probe emitted when build() is refused."""
        ...

    def with_context(self, context: ObservationContext) -> PolicyBuilderProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPolicyBuilderProbe:
    """Default implementation of PolicyBuilderProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultPolicyBuilderProbe:
        """Create a new probe with observation context bound."""
        return DefaultPolicyBuilderProbe(logger=self._logger, context=context)

    def rule_registered(
        self,
        effect: str,
        verb: str,
        resource_arn: str,
        conditional: bool,
    ) -> None:
        self._logger.debug(
            "policy_rule_registered",
            effect=effect,
            verb=verb,
            resource_arn=resource_arn,
            conditional=conditional,
            **self._get_context_kwargs(),
        )

    def rule_rejected(
        self,
        effect: str,
        verb: str,
        path: str,
        reason: str,
    ) -> None:
        self._logger.warning(
            "policy_rule_rejected",
            effect=effect,
            verb=verb,
            path=path,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def statement_appended(self) -> None:
        self._logger.debug(
            "policy_custom_statement_appended",
            **self._get_context_kwargs(),
        )

    def policy_built(
        self,
        statement_count: int,
        custom_statement_count: int,
    ) -> None:
        self._logger.info(
            "policy_built",
            statement_count=statement_count,
            custom_statement_count=custom_statement_count,
            **self._get_context_kwargs(),
        )

    def build_rejected(self, reason: str) -> None:
        self._logger.warning(
            "policy_build_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )
