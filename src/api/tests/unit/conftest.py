"""Unit test fixtures with mocked dependencies."""

import pytest
from unittest.mock import Mock


@pytest.fixture
def mock_builder_probe():
    """Provide a mocked policy builder probe."""
    probe = Mock()
    probe.with_context.return_value = probe
    return probe


@pytest.fixture
def mock_service_probe():
    """Provide a mocked authorizer service probe."""
    probe = Mock()
    probe.with_context.return_value = probe
    return probe


@pytest.fixture
def test_settings():
    """Provide authorizer settings independent of the environment."""
    from infrastructure.settings import AuthorizerSettings

    return AuthorizerSettings(
        _env_file=None,
        log_level="DEBUG",
        log_json=True,
        default_payload_version="1.0",
    )


@pytest.fixture
def token_event():
    """Provide a REST API TOKEN authorizer event (no payload version)."""
    return {
        "type": "TOKEN",
        "authorizationToken": "allow",
        "methodArn": "arn:aws:execute-api:ap-southeast-2:123123123123:123sdfasdf12/prod/GET/pets/42",
    }


@pytest.fixture
def http_api_event():
    """Provide an HTTP API REQUEST authorizer event (payload 2.0)."""
    return {
        "version": "2.0",
        "type": "REQUEST",
        "routeArn": "arn:aws:execute-api:us-east-1:111122223333:abcdef123/$default/POST/orders",
        "identitySource": ["Bearer abc"],
        "requestContext": {"requestId": "req-123", "accountId": "111122223333"},
    }
