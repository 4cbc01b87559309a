"""
Argument extraction and result serialization for generated dispatch code.

Extraction validates raw JSON-like values with pydantic TypeAdapters;
serialization turns return values into JSON-compatible data according to the
method's return shape.
"""

import base64
import dataclasses
import inspect
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from pydantic import BaseModel, ValidationError

from .error_codes import ErrorCode, error_code_of
from .errors import InvalidParams, MethodFailed
from .outcome import split_outcome

_MISSING = object()


def to_jsonable(value: Any) -> Any:
    """Convert a value into plain JSON-compatible data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, ErrorCode):
        return value.name
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if isinstance(value, Enum):
        return to_jsonable(value.value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    raise TypeError(f"Value of type {type(value).__name__} is not JSON serializable")


def extract_argument(params: Mapping[str, Any], wire_name: str, adapter, required=True, default=None):
    """
    Read one argument from a JSON-like payload.

    Missing and explicit null values of optional parameters fall back to the
    default unchanged; present values are validated against the inner type.
    """
    raw = params.get(wire_name, _MISSING) if isinstance(params, Mapping) else _MISSING
    if raw is _MISSING or raw is None:
        if required:
            raise InvalidParams(f"Missing required parameter '{wire_name}'")
        return default
    try:
        return adapter.validate_python(raw)
    except ValidationError as exc:
        raise InvalidParams(
            f"Invalid value for parameter '{wire_name}'",
            exc.errors(include_url=False, include_context=False),
        ) from exc


def check_params(params: Any) -> Mapping[str, Any]:
    if params is None:
        return {}
    if not isinstance(params, Mapping):
        raise InvalidParams("Parameters must be a JSON object keyed by name")
    return params


async def resolve(result):
    """Await results of asynchronous methods; async generators pass through."""
    if inspect.isawaitable(result):
        return await result
    return result


def serialize_result(method: str, shape: str, result: Any) -> Any:
    """Serialize a non-streaming result by return shape."""
    if shape == "unit":
        return {}
    if shape == "outcome":
        ok, payload = split_outcome(result)
        if not ok:
            raise MethodFailed(method, to_jsonable(payload), error_code_of(payload))
        return to_jsonable(payload)
    if shape == "optional":
        return None if result is None else to_jsonable(result)
    if shape == "sequence":
        return [to_jsonable(item) for item in result]
    return to_jsonable(result)


def iter_stream(result):
    """Lazily serialize the items of a synchronous iterator."""
    for item in result:
        yield to_jsonable(item)


async def aiter_stream(result):
    """Lazily serialize the items of a sync or async iterator."""
    if hasattr(result, "__aiter__"):
        async for item in result:
            yield to_jsonable(item)
    else:
        for item in result:
            yield to_jsonable(item)
