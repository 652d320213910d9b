"""Authorizer application service.

Bridges an API Gateway authorizer event and an authenticated principal to the
Policy context: it locates the invoked method, seeds a PolicyBuilder scoped to
that API, lets the caller register rules, and returns the wire response.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from authorizer.application.events import AuthorizerEvent, PayloadVersion
from authorizer.application.exceptions import UnauthorizedError
from authorizer.application.observability import (
    AuthorizerServiceProbe,
    DefaultAuthorizerServiceProbe,
)
from infrastructure.settings import AuthorizerSettings, get_authorizer_settings
from policy.domain.builder import PolicyBuilder
from policy.domain.observability import DefaultPolicyBuilderProbe, PolicyBuilderProbe
from policy.domain.value_objects import ContextValue
from shared_kernel.authorization.resource_reference import ResourceReference
from shared_kernel.authorization.types import Effect
from shared_kernel.observability_context import ObservationContext

# Registers rules on a builder for the request identified by the reference.
Grant = Callable[[PolicyBuilder, ResourceReference], None]


def grant_all(effect: Effect) -> Grant:
    """Grant that allows or denies every method of the invoked API."""

    def _grant(builder: PolicyBuilder, reference: ResourceReference) -> None:
        if effect == Effect.ALLOW:
            builder.allow_all_methods()
        else:
            builder.deny_all_methods()

    return _grant


def policy_builder_from_event(
    event: AuthorizerEvent | Mapping[str, Any],
    principal_id: str,
    default_version: PayloadVersion | str = PayloadVersion.V1,
    probe: PolicyBuilderProbe | None = None,
) -> tuple[PolicyBuilder, ResourceReference]:
    """Create a builder scoped to the API an authorizer event was raised for.

    Args:
        event: Raw event mapping or parsed AuthorizerEvent
        principal_id: Principal established by the authentication layer
        default_version: Payload version assumed when the event has none
        probe: Optional probe for the created builder

    Returns:
        Tuple of (builder, parsed reference of the invoked method)

    Raises:
        FormatError: If the event has no usable ARN
        pydantic.ValidationError: If the event mapping is malformed
    """
    if not isinstance(event, AuthorizerEvent):
        event = AuthorizerEvent.model_validate(event)

    reference = ResourceReference.parse(event.resource_arn(default_version))
    builder = PolicyBuilder.from_resource_reference(principal_id, reference, probe=probe)
    return builder, reference


class AuthorizerService:
    """Application service issuing authorizer responses.

    Every failure, whether a malformed event, an invalid rule, or an error
    raised by the grant callable, is logged and surfaced as UnauthorizedError.
    """

    def __init__(
        self,
        settings: AuthorizerSettings | None = None,
        probe: AuthorizerServiceProbe | None = None,
        builder_probe: PolicyBuilderProbe | None = None,
    ):
        """Initialize AuthorizerService.

        Args:
            settings: Authorizer settings (defaults to environment settings)
            probe: Optional domain probe for observability
            builder_probe: Optional probe handed to each PolicyBuilder
        """
        self._settings = settings or get_authorizer_settings()
        self._probe = probe or DefaultAuthorizerServiceProbe()
        self._builder_probe = builder_probe or DefaultPolicyBuilderProbe()

    def authorize(
        self,
        event: AuthorizerEvent | Mapping[str, Any],
        principal_id: str,
        grant: Grant,
        context: Mapping[str, ContextValue] | None = None,
    ) -> dict[str, Any]:
        """Issue the authorizer response for one request.

        Args:
            event: Raw authorizer event or parsed AuthorizerEvent
            principal_id: Principal established by the authentication layer
            grant: Callable registering rules for the request
            context: Optional flat context for $context.authorizer.<key>

        Returns:
            JSON-serializable authorizer response

        Raises:
            UnauthorizedError: If anything prevents issuing a policy
        """
        observation = ObservationContext(principal_id=principal_id)
        probe = self._probe.with_context(observation)

        try:
            if not isinstance(event, AuthorizerEvent):
                event = AuthorizerEvent.model_validate(event)
            observation = ObservationContext(
                request_id=event.request_id, principal_id=principal_id
            ).with_extra(**self._event_metadata(event))
            probe = self._probe.with_context(observation)

            builder, reference = policy_builder_from_event(
                event,
                principal_id,
                default_version=self._settings.default_payload_version,
                probe=self._builder_probe.with_context(observation),
            )
            probe = self._probe.with_context(observation.with_api(reference.api_id))

            grant(builder, reference)
            if context is not None:
                builder.with_context(context)
            result = builder.build()
        except UnauthorizedError as e:
            probe.authorization_failed(error=e)
            raise
        except Exception as e:
            probe.authorization_failed(error=e)
            raise UnauthorizedError() from e

        probe.authorization_decided(
            resource_arn=reference.render(),
            statement_count=len(result.policy_document.statements),
        )
        return result.to_dict()

    def _event_metadata(self, event: AuthorizerEvent) -> dict[str, str]:
        """Event type and effective payload version for log correlation."""
        version = event.version or PayloadVersion(self._settings.default_payload_version)
        metadata = {"payload_version": str(version)}
        if event.type is not None:
            metadata["event_type"] = event.type
        return metadata
