"""Authorization type definitions for API Gateway policies.

Defines HTTP verbs, statement effects, and IAM condition vocabulary used by
authorizer policy documents. These enums ensure type safety and prevent
hardcoded strings across the codebase.
"""

from enum import StrEnum

POLICY_VERSION = "2012-10-17"
INVOKE_ACTION = "execute-api:Invoke"
WILDCARD = "*"

DEFAULT_PARTITION = "aws"
DEFAULT_SERVICE = "execute-api"


class HttpVerb(StrEnum):
    """HTTP verbs supported by API Gateway method ARNs.

    ALL is the wildcard matching every verb.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    HEAD = "HEAD"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    ALL = WILDCARD


class Effect(StrEnum):
    """Outcome attached to a policy statement."""

    ALLOW = "Allow"
    DENY = "Deny"


class ConditionOperator(StrEnum):
    """IAM condition operators.

    Each value is the literal operator name used as a key of a statement's
    ``Condition`` block.
    """

    STRING_EQUALS = "StringEquals"
    STRING_NOT_EQUALS = "StringNotEquals"
    STRING_EQUALS_IGNORE_CASE = "StringEqualsIgnoreCase"
    STRING_NOT_EQUALS_IGNORE_CASE = "StringNotEqualsIgnoreCase"
    STRING_LIKE = "StringLike"
    STRING_NOT_LIKE = "StringNotLike"
    NUMERIC_EQUALS = "NumericEquals"
    NUMERIC_NOT_EQUALS = "NumericNotEquals"
    NUMERIC_LESS_THAN = "NumericLessThan"
    NUMERIC_LESS_THAN_EQUALS = "NumericLessThanEquals"
    NUMERIC_GREATER_THAN = "NumericGreaterThan"
    NUMERIC_GREATER_THAN_EQUALS = "NumericGreaterThanEquals"
    DATE_EQUALS = "DateEquals"
    DATE_NOT_EQUALS = "DateNotEquals"
    DATE_LESS_THAN = "DateLessThan"
    DATE_LESS_THAN_EQUALS = "DateLessThanEquals"
    DATE_GREATER_THAN = "DateGreaterThan"
    DATE_GREATER_THAN_EQUALS = "DateGreaterThanEquals"
    BOOL = "Bool"
    BINARY_EQUALS = "BinaryEquals"
    IP_ADDRESS = "IpAddress"
    NOT_IP_ADDRESS = "NotIpAddress"
    ARN_EQUALS = "ArnEquals"
    ARN_LIKE = "ArnLike"
    ARN_NOT_EQUALS = "ArnNotEquals"
    ARN_NOT_LIKE = "ArnNotLike"
    NULL = "Null"


class ConditionKey(StrEnum):
    """Global ``aws:`` condition keys available to authorizer policies."""

    CURRENT_TIME = "aws:CurrentTime"
    EPOCH_TIME = "aws:EpochTime"
    MULTI_FACTOR_AUTH_AGE = "aws:MultiFactorAuthAge"
    MULTI_FACTOR_AUTH_PRESENT = "aws:MultiFactorAuthPresent"
    REFERER = "aws:Referer"
    SECURE_TRANSPORT = "aws:SecureTransport"
    SOURCE_ARN = "aws:SourceArn"
    SOURCE_IP = "aws:SourceIp"
    TOKEN_ISSUE_TIME = "aws:TokenIssueTime"
    USER_AGENT = "aws:UserAgent"
    PRINCIPAL_TYPE = "aws:PrincipalType"
    SOURCE_VPC = "aws:SourceVpc"
    SOURCE_VPCE = "aws:SourceVpce"
    USERID = "aws:userid"
    USERNAME = "aws:username"


def format_resource_arn(
    partition: str,
    service: str,
    region: str,
    account_id: str,
    api_id: str,
    stage: str,
    verb: str,
    resource_path: str | None = None,
) -> str:
    """Format an API Gateway execute-api ARN.

    Args:
        partition: AWS partition (e.g., "aws")
        service: Service namespace (e.g., "execute-api")
        region: Region of the API, or "*"
        account_id: Account that owns the API
        api_id: API identifier, or "*"
        stage: Deployment stage, or "*"
        verb: HTTP verb, or "*"
        resource_path: Path after the verb, without a leading slash.
            Omitted entirely (no trailing slash) when None.

    Returns:
        Formatted ARN string

    Example:
        >>> format_resource_arn("aws", "execute-api", "us-east-1", "123", "abc", "prod", "GET", "pets")
        "arn:aws:execute-api:us-east-1:123:abc/prod/GET/pets"
    """
    arn = f"arn:{partition}:{service}:{region}:{account_id}:{api_id}/{stage}/{verb}"
    if resource_path is not None:
        arn = f"{arn}/{resource_path}"
    return arn
