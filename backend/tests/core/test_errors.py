"""Tests for the error hierarchy — codes, HTTP mapping and reply shape."""

import pytest

from conto.core.errors import (
    DatabaseError,
    DispatchTimeoutError,
    ErrorCode,
    ErrorContext,
    InvalidRequestError,
    NoSubscriberError,
    ProviderAPIError,
    ProviderConnectionError,
    ProviderParseError,
    SerializationError,
    http_status_for,
)


@pytest.mark.parametrize(
    "code, status",
    [
        (400, 400), (401, 400), (402, 400), (499, 400),
        (500, 502), (501, 502), (502, 502), (599, 502),
        (600, 500), (601, 500), (602, 500), (603, 500), (0, 500),
    ],
)
def test_http_status_from_code_range(code, status):
    assert http_status_for(code) == status


def test_invalid_request_prefixes_code():
    err = InvalidRequestError("Error parsing request JSON")
    assert err.code == ErrorCode.VALIDATION_INVALID_REQUEST
    assert err.message == "ErrorCode 400 - Error parsing request JSON"
    assert err.http_status == 400


def test_provider_api_error_keeps_message_and_status():
    err = ProviderAPIError("ErrorCode 500 - code: X, description: Y; ", 403)
    assert err.message == "ErrorCode 500 - code: X, description: Y; "
    assert err.context.status_code == 403
    assert err.http_status == 502


def test_connection_error_message():
    err = ProviderConnectionError("Connection refused")
    assert err.code == ErrorCode.API_CONNECTION_FAILED
    assert err.message == (
        "ErrorCode 501 - Unable to call bank API, service may be down: "
        "Connection refused"
    )


def test_parse_and_serialization_codes():
    assert ProviderParseError("x").code == ErrorCode.API_PARSE_ERROR
    assert SerializationError("x").http_status == 500


def test_dispatch_errors_carry_topic():
    timeout = DispatchTimeoutError("balance", 100.0)
    assert timeout.code == ErrorCode.DISPATCH_TIMEOUT
    assert timeout.context.topic == "balance"
    assert "100s" in timeout.message
    assert NoSubscriberError("balance").code == ErrorCode.DISPATCH_NO_HANDLER


def test_database_error_is_internal():
    err = DatabaseError("Integrity constraint violated", "commit")
    assert err.code == ErrorCode.INTERNAL_ERROR
    assert err.operation == "commit"


def test_to_response_shape():
    err = InvalidRequestError(
        "Missing required field: url",
        ErrorCode.VALIDATION_MISSING_PARAMETER,
        ErrorContext(correlation_id="req-1"),
    )
    assert err.to_response() == {
        "status": "ERROR",
        "code": 401,
        "category": "validation",
        "message": "ErrorCode 401 - Missing required field: url",
        "requestId": "req-1",
    }
