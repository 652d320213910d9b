"""Parser for API Gateway resource locators (execute-api ARNs).

A locator has the canonical form::

    arn:{partition}:{service}:{region}:{account}:{apiId}/{stage}/{verb}[/{subPath}]

Parsing is purely positional; no segment other than the ``arn`` marker is
checked against a vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared_kernel.authorization.exceptions import FormatError
from shared_kernel.authorization.types import (
    DEFAULT_PARTITION,
    DEFAULT_SERVICE,
    HttpVerb,
    format_resource_arn,
)

ARN_MARKER = "arn"
_SEGMENT_COUNT = 6
_MIN_PATH_PARTS = 3


@dataclass(frozen=True)
class ResourceReference:
    """Structural parts of an execute-api resource locator.

    Attributes:
        region: Region of the API
        account_id: Account that owns the API
        api_id: API identifier
        stage: Deployment stage
        verb: HTTP verb as it appears in the locator (may be "*")
        sub_path: Path segments after the verb, empty when absent
        partition: AWS partition
        service: Service namespace
    """

    region: str
    account_id: str
    api_id: str
    stage: str
    verb: str
    sub_path: tuple[str, ...] = ()
    partition: str = DEFAULT_PARTITION
    service: str = DEFAULT_SERVICE

    @classmethod
    def parse(cls, raw: str) -> ResourceReference:
        """Parse a locator string into its parts.

        Args:
            raw: Locator string, e.g.
                "arn:aws:execute-api:eu-west-1:123456789012:abc123/dev/GET/pets/1"

        Returns:
            ResourceReference instance

        Raises:
            FormatError: If the string has fewer than 6 colon-separated
                segments, does not start with "arn", or its last segment has
                fewer than 3 slash-separated parts
        """
        if not isinstance(raw, str):
            raise FormatError(f"Invalid arn format: expected a string, got {type(raw).__name__}")

        segments = raw.split(":", _SEGMENT_COUNT - 1)
        if len(segments) < _SEGMENT_COUNT:
            raise FormatError(f"Invalid arn format: {raw}")
        if segments[0] != ARN_MARKER:
            raise FormatError(f"Invalid arn format: {raw} does not start with '{ARN_MARKER}'")

        path_parts = segments[5].split("/")
        if len(path_parts) < _MIN_PATH_PARTS:
            raise FormatError(
                f"Invalid arn format: {raw} must contain apiId/stage/verb"
            )

        return cls(
            partition=segments[1],
            service=segments[2],
            region=segments[3],
            account_id=segments[4],
            api_id=path_parts[0],
            stage=path_parts[1],
            verb=path_parts[2],
            sub_path=tuple(path_parts[3:]),
        )

    @classmethod
    def try_parse(cls, raw: str) -> tuple[bool, ResourceReference | None]:
        """Parse without raising.

        Returns:
            (True, reference) on success, (False, None) otherwise
        """
        try:
            return True, cls.parse(raw)
        except FormatError:
            return False, None

    @property
    def http_verb(self) -> HttpVerb | None:
        """The verb as an HttpVerb, or None if it is not a known verb."""
        try:
            return HttpVerb(self.verb)
        except ValueError:
            return None

    @property
    def resource_path(self) -> str:
        """The sub-path as a request path (always starts with "/")."""
        return "/" + "/".join(self.sub_path)

    def render(self) -> str:
        """Re-assemble the canonical locator string."""
        return format_resource_arn(
            partition=self.partition,
            service=self.service,
            region=self.region,
            account_id=self.account_id,
            api_id=self.api_id,
            stage=self.stage,
            verb=self.verb,
            resource_path="/".join(self.sub_path) if self.sub_path else None,
        )

    def __str__(self) -> str:
        """Return string representation."""
        return self.render()
