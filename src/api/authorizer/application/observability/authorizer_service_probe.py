"""Protocol for authorizer application service observability.

Defines the interface for domain probes that capture application-level
events for authorization decisions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizerServiceProbe(Protocol):
    """Domain probe for authorizer service operations."""

    def authorization_decided(
        self,
        resource_arn: str,
        statement_count: int,
    ) -> None:
        """Record that a policy was issued for a request."""
        ...

    def authorization_failed(self, error: Exception) -> None:
        """Record that a request was refused with Unauthorized."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizerServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizerServiceProbe:
    """Default implementation of AuthorizerServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthorizerServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizerServiceProbe(logger=self._logger, context=context)

    def authorization_decided(
        self,
        resource_arn: str,
        statement_count: int,
    ) -> None:
        """Record that a policy was issued for a request."""
        self._logger.info(
            "authorization_decided",
            resource_arn=resource_arn,
            statement_count=statement_count,
            **self._get_context_kwargs(),
        )

    def authorization_failed(self, error: Exception) -> None:
        """Record that a request was refused with Unauthorized."""
        self._logger.warning(
            "authorization_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
