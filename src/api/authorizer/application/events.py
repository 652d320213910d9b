"""Pydantic models for API Gateway Lambda authorizer events."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from shared_kernel.authorization.exceptions import FormatError


class PayloadVersion(StrEnum):
    """Authorizer payload format versions.

    REST API events carry no version and behave like 1.0.
    """

    V1 = "1.0"
    V2 = "2.0"


class RequestContext(BaseModel):
    """Subset of the event's requestContext used for correlation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    request_id: str | None = Field(default=None, alias="requestId")


class AuthorizerEvent(BaseModel):
    """Incoming authorizer event (TOKEN or REQUEST, payload 1.0 or 2.0).

    Only the fields needed to locate the invoked method and to correlate logs
    are modelled; the rest of the event, including the caller's token, is
    ignored. Verifying the token is the job of the authentication layer that
    supplies the principal.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    type: str | None = Field(default=None, description="TOKEN or REQUEST")
    version: PayloadVersion | None = Field(default=None, description="Payload version")
    method_arn: str | None = Field(default=None, alias="methodArn")
    route_arn: str | None = Field(default=None, alias="routeArn")
    request_context: RequestContext | None = Field(default=None, alias="requestContext")

    @property
    def request_id(self) -> str | None:
        if self.request_context is None:
            return None
        return self.request_context.request_id

    def resource_arn(self, default_version: PayloadVersion | str = PayloadVersion.V1) -> str:
        """Locator of the invoked method for this event's payload version.

        Version 2.0 events identify the route by routeArn, everything else by
        methodArn. If the preferred field is absent the other one is used.

        Args:
            default_version: Version assumed when the event carries none

        Returns:
            The resource locator string

        Raises:
            FormatError: If the event carries neither methodArn nor routeArn
        """
        version = self.version or PayloadVersion(default_version)
        if version == PayloadVersion.V2:
            arn = self.route_arn or self.method_arn
        else:
            arn = self.method_arn or self.route_arn

        if not arn:
            raise FormatError("Arn not found. Check your event format.")
        return arn
