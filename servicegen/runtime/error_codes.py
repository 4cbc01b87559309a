"""
Protocol-agnostic error codes for failure values.

A Failure payload carries no transport status of its own. Its code is
inferred by convention from a name it exposes, in this order:

    ErrorCode member            -> itself
    enum member                 -> member name          (UserError.NOT_FOUND)
    string                      -> the string           ("permission_denied")
    mapping                     -> "code" / "kind" / "type" / "error" entry
    object                      -> `code` / `kind` attribute, else class name

Each code maps to an HTTP status, a gRPC status name and a CLI exit code.
A name matching no convention yields None; transports then fall back to
400 / exit 1.
"""

from enum import Enum
from typing import Any, Mapping, Optional


class ErrorCode(Enum):
    INVALID_INPUT = (400, "INVALID_ARGUMENT", 2)
    UNAUTHENTICATED = (401, "UNAUTHENTICATED", 3)
    FORBIDDEN = (403, "PERMISSION_DENIED", 3)
    NOT_FOUND = (404, "NOT_FOUND", 1)
    CONFLICT = (409, "ALREADY_EXISTS", 4)
    FAILED_PRECONDITION = (422, "FAILED_PRECONDITION", 4)
    RATE_LIMITED = (429, "RESOURCE_EXHAUSTED", 5)
    INTERNAL = (500, "INTERNAL", 1)
    NOT_IMPLEMENTED = (501, "UNIMPLEMENTED", 1)
    UNAVAILABLE = (503, "UNAVAILABLE", 1)

    def __init__(self, http_status: int, grpc_code: str, exit_code: int):
        self.http_status = http_status
        self.grpc_code = grpc_code
        self.exit_code = exit_code


DEFAULT_HTTP_STATUS = 400
DEFAULT_EXIT_CODE = 1

# first match wins; names are compared lowercased with '_', '-' and spaces removed
_CONVENTIONS = (
    (("notfound", "missing"), ErrorCode.NOT_FOUND),
    (("invalid", "validation", "parse"), ErrorCode.INVALID_INPUT),
    (("unauthorized", "unauthenticated"), ErrorCode.UNAUTHENTICATED),
    (("forbidden", "permission", "denied"), ErrorCode.FORBIDDEN),
    (("conflict", "exists", "duplicate"), ErrorCode.CONFLICT),
    (("precondition",), ErrorCode.FAILED_PRECONDITION),
    (("ratelimit", "throttle", "toomany"), ErrorCode.RATE_LIMITED),
    (("unavailable", "temporarily"), ErrorCode.UNAVAILABLE),
    (("unimplemented", "notimplemented"), ErrorCode.NOT_IMPLEMENTED),
    (("internal",), ErrorCode.INTERNAL),
)

_NAME_KEYS = ("code", "kind", "type", "error")
_PLAIN_TYPES = (dict, list, tuple, set, frozenset, int, float, bool, bytes, type(None))


def infer_error_code(name: str) -> Optional[ErrorCode]:
    """Map a type, variant or code name to an ErrorCode by naming convention."""
    squashed = "".join(ch for ch in name.lower() if ch not in "_- ")
    for needles, code in _CONVENTIONS:
        if any(needle in squashed for needle in needles):
            return code
    return None


def _name_of(payload: Any) -> Optional[str]:
    if isinstance(payload, Enum):
        return payload.name
    if isinstance(payload, str):
        return payload
    if isinstance(payload, Mapping):
        for key in _NAME_KEYS:
            value = payload.get(key)
            if isinstance(value, (str, Enum)):
                return _name_of(value)
        return None
    for attribute in ("code", "kind"):
        value = getattr(payload, attribute, None)
        if isinstance(value, (str, Enum)):
            return _name_of(value)
    if isinstance(payload, _PLAIN_TYPES):
        return None
    return type(payload).__name__


def error_code_of(payload: Any) -> Optional[ErrorCode]:
    """The ErrorCode of a Failure payload, or None when nothing identifies it."""
    if isinstance(payload, ErrorCode):
        return payload
    name = _name_of(payload)
    return infer_error_code(name) if name else None


def http_status_of(code: Optional[ErrorCode]) -> int:
    return code.http_status if code else DEFAULT_HTTP_STATUS


def exit_code_of(code: Optional[ErrorCode]) -> int:
    return code.exit_code if code else DEFAULT_EXIT_CODE


__all__ = [
    "ErrorCode",
    "error_code_of",
    "exit_code_of",
    "http_status_of",
    "infer_error_code",
]
