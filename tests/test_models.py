"""Tests for endpoint and wire models, results, and request errors."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from netlib.exceptions import RequestError, RequestErrorKind
from netlib.models import EndpointSpec, ErrorResponse, HTTPMethod, QueryItem
from netlib.result import Result


class TestEndpointSpec:
    def test_defaults(self) -> None:
        endpoint = EndpointSpec(host="api.example.com")
        assert endpoint.scheme == "https"
        assert endpoint.version == ""
        assert endpoint.path == ""
        assert endpoint.method == HTTPMethod.GET
        assert endpoint.header is None
        assert endpoint.parameters is None
        assert endpoint.body is None
        assert endpoint.boundary is None

    def test_frozen(self) -> None:
        endpoint = EndpointSpec(host="api.example.com")
        with pytest.raises(ValidationError):
            endpoint.host = "other.example.com"  # type: ignore[misc]

    def test_method_from_string(self) -> None:
        assert EndpointSpec(host="h", method="DELETE").method == HTTPMethod.DELETE

    def test_parameters_coerced_to_query_items(self) -> None:
        endpoint = EndpointSpec(host="h", parameters=[("a", "1"), ("b", None)])
        assert endpoint.parameters == [QueryItem("a", "1"), QueryItem("b", None)]


class TestErrorResponse:
    def test_message_required(self) -> None:
        with pytest.raises(ValidationError):
            ErrorResponse.model_validate_json(b'{"detail": "x"}')

    def test_extra_fields_kept(self) -> None:
        response = ErrorResponse.model_validate_json(b'{"message": "m", "code": 4}')
        assert response.message == "m"
        assert response.model_extra == {"code": 4}


class TestRequestError:
    def test_equality_uses_kind_and_message(self) -> None:
        assert RequestError.bad_request("x") == RequestError.bad_request("x")
        assert RequestError.bad_request("x") != RequestError.bad_request("y")
        assert RequestError.unauthorized() != RequestError.unknown()

    def test_hashable(self) -> None:
        assert len({RequestError.unknown(), RequestError.unknown()}) == 1

    def test_factories(self) -> None:
        assert RequestError.invalid_url().kind == RequestErrorKind.INVALID_URL
        assert RequestError.no_response().kind == RequestErrorKind.NO_RESPONSE
        assert RequestError.unexpected_status_code("m").message == "m"
        assert RequestError.unexpected_error("m").kind == RequestErrorKind.UNEXPECTED_ERROR
        assert RequestError.internet_connection("m").kind == RequestErrorKind.INTERNET_CONNECTION
        assert RequestError.unknown().message is None

    def test_str_and_repr(self) -> None:
        assert str(RequestError.bad_request("missing field")) == "missing field"
        assert str(RequestError.unauthorized()) == "unauthorized"
        assert repr(RequestError.bad_request("m")) == "RequestError(BAD_REQUEST, 'm')"
        assert repr(RequestError.unknown()) == "RequestError(UNKNOWN)"


class TestResult:
    def test_success(self) -> None:
        result = Result.success(5)
        assert result.is_success and not result.is_failure
        assert result.value == 5
        assert result.error is None
        assert result.unwrap() == 5
        assert result.unwrap_or(0) == 5

    def test_failure(self) -> None:
        result: Result[int] = Result.failure(RequestError.unauthorized())
        assert result.is_failure and not result.is_success
        assert result.value is None
        assert result.unwrap_or(0) == 0
        with pytest.raises(RequestError) as excinfo:
            result.unwrap()
        assert excinfo.value == RequestError.unauthorized()

    def test_success_may_hold_none(self) -> None:
        assert Result.success(None).is_success

    def test_equality_and_repr(self) -> None:
        assert Result.success(1) == Result.success(1)
        assert Result.success(1) != Result.failure(RequestError.unknown())
        assert repr(Result.success(1)) == "Result.success(1)"
        assert repr(Result.failure(RequestError.unknown())) == "Result.failure(RequestError(UNKNOWN))"
