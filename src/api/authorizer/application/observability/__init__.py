"""Observability for authorizer application services."""

from authorizer.application.observability.authorizer_service_probe import (
    AuthorizerServiceProbe,
    DefaultAuthorizerServiceProbe,
)

__all__ = [
    "AuthorizerServiceProbe",
    "DefaultAuthorizerServiceProbe",
]
