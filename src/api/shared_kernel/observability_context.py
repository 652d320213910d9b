"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events of one authorization decision.

    Attributes:
        request_id: Identifier of the authorizer invocation (if known).
        principal_id: Principal the policy is being issued for.
        api_id: API identifier taken from the resource locator.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(
            request_id="c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
            principal_id="user|a1b2c3d4",
        )
        probe = DefaultPolicyBuilderProbe().with_context(context)
    """

    request_id: str | None = None
    principal_id: str | None = None
    api_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.principal_id is not None:
            result["principal_id"] = self.principal_id
        if self.api_id is not None:
            result["api_id"] = self.api_id
        result.update(self.extra)
        return result

    def with_api(self, api_id: str) -> ObservationContext:
        """Create a new context with the API identifier set."""
        return ObservationContext(
            request_id=self.request_id,
            principal_id=self.principal_id,
            api_id=api_id,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        new_extra = {**self.extra, **kwargs}
        return ObservationContext(
            request_id=self.request_id,
            principal_id=self.principal_id,
            api_id=self.api_id,
            extra=new_extra,
        )
