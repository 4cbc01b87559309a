"""
Unit tests for failure payload error codes.
"""

import enum
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from servicegen.runtime import ErrorCode, Failure, MethodFailed, error_code_of, serialize_result
from servicegen.runtime.error_codes import exit_code_of, http_status_of, infer_error_code


class UserNotFound(Exception):
    pass


class AccountError(enum.Enum):
    ALREADY_EXISTS = "already_exists"
    RATE_LIMITED = "slow_down"


@dataclass
class Problem:
    code: str
    detail: str = ""


class Denied(BaseModel):
    reason: str


class TestTable:
    @pytest.mark.parametrize("code,http,grpc,exit_code", [
        (ErrorCode.INVALID_INPUT, 400, "INVALID_ARGUMENT", 2),
        (ErrorCode.UNAUTHENTICATED, 401, "UNAUTHENTICATED", 3),
        (ErrorCode.FORBIDDEN, 403, "PERMISSION_DENIED", 3),
        (ErrorCode.NOT_FOUND, 404, "NOT_FOUND", 1),
        (ErrorCode.CONFLICT, 409, "ALREADY_EXISTS", 4),
        (ErrorCode.FAILED_PRECONDITION, 422, "FAILED_PRECONDITION", 4),
        (ErrorCode.RATE_LIMITED, 429, "RESOURCE_EXHAUSTED", 5),
        (ErrorCode.INTERNAL, 500, "INTERNAL", 1),
        (ErrorCode.NOT_IMPLEMENTED, 501, "UNIMPLEMENTED", 1),
        (ErrorCode.UNAVAILABLE, 503, "UNAVAILABLE", 1),
    ])
    def test_mappings(self, code, http, grpc, exit_code):
        assert (code.http_status, code.grpc_code, code.exit_code) == (http, grpc, exit_code)

    def test_defaults_without_a_code(self):
        assert http_status_of(None) == 400
        assert exit_code_of(None) == 1


class TestInference:
    @pytest.mark.parametrize("name,code", [
        ("NotFound", ErrorCode.NOT_FOUND),
        ("UserNotFound", ErrorCode.NOT_FOUND),
        ("not_found", ErrorCode.NOT_FOUND),
        ("InvalidEmail", ErrorCode.INVALID_INPUT),
        ("ParseError", ErrorCode.INVALID_INPUT),
        ("Unauthorized", ErrorCode.UNAUTHENTICATED),
        ("Forbidden", ErrorCode.FORBIDDEN),
        ("permission-denied", ErrorCode.FORBIDDEN),
        ("AlreadyExists", ErrorCode.CONFLICT),
        ("DuplicateKey", ErrorCode.CONFLICT),
        ("rate_limit", ErrorCode.RATE_LIMITED),
        ("ServiceUnavailable", ErrorCode.UNAVAILABLE),
        ("NotImplemented", ErrorCode.NOT_IMPLEMENTED),
        ("InternalError", ErrorCode.INTERNAL),
    ])
    def test_names(self, name, code):
        assert infer_error_code(name) is code

    def test_unknown_name(self):
        assert infer_error_code("Quota") is None

    @pytest.mark.parametrize("payload,code", [
        (ErrorCode.FORBIDDEN, ErrorCode.FORBIDDEN),
        (UserNotFound("42"), ErrorCode.NOT_FOUND),
        (AccountError.ALREADY_EXISTS, ErrorCode.CONFLICT),
        (AccountError.RATE_LIMITED, ErrorCode.RATE_LIMITED),
        ("invalid_email", ErrorCode.INVALID_INPUT),
        ({"code": "invalid_email", "message": "bad"}, ErrorCode.INVALID_INPUT),
        ({"kind": "NotFound"}, ErrorCode.NOT_FOUND),
        ({"error": AccountError.ALREADY_EXISTS}, ErrorCode.CONFLICT),
        (Problem("forbidden"), ErrorCode.FORBIDDEN),
        (Denied(reason="x"), ErrorCode.FORBIDDEN),
    ])
    def test_payloads(self, payload, code):
        assert error_code_of(payload) is code

    @pytest.mark.parametrize("payload", [None, 42, ["not_found"], {"message": "no code"}, {"code": 404}])
    def test_payloads_without_a_name(self, payload):
        assert error_code_of(payload) is None


class TestMethodFailed:
    def test_code_is_inferred_before_serialization(self):
        with pytest.raises(MethodFailed) as info:
            serialize_result("get_user", "outcome", Failure(UserNotFound("42")))

        assert info.value.error_code is ErrorCode.NOT_FOUND
        assert info.value.message == "Method 'get_user' failed (NOT_FOUND)"

    def test_error_code_payload_serializes_as_its_name(self):
        with pytest.raises(MethodFailed) as info:
            serialize_result("delete_user", "outcome", Failure(ErrorCode.FORBIDDEN))

        assert info.value.data == "FORBIDDEN"

    def test_unclassified_failure(self):
        with pytest.raises(MethodFailed) as info:
            serialize_result("m", "outcome", Failure({"message": "no"}))

        assert info.value.error_code is None
        assert info.value.to_dict() == {"code": -32000, "message": "Method 'm' failed", "data": {"message": "no"}}
