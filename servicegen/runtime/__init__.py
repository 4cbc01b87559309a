"""Runtime support imported by generated routers, dispatchers and CLIs."""

from .context import Context
from .error_codes import ErrorCode, error_code_of, exit_code_of, http_status_of
from .errors import (
    AsyncMethodOnSynchronousCaller,
    DispatchError,
    InvalidParams,
    MethodFailed,
    UnknownMethod,
)
from .outcome import Failure, Success, split_outcome
from .serialization import (
    aiter_stream,
    check_params,
    extract_argument,
    iter_stream,
    resolve,
    serialize_result,
    to_jsonable,
)

__all__ = [
    "Context",
    "ErrorCode",
    "error_code_of",
    "exit_code_of",
    "http_status_of",
    "AsyncMethodOnSynchronousCaller",
    "DispatchError",
    "InvalidParams",
    "MethodFailed",
    "UnknownMethod",
    "Failure",
    "Success",
    "split_outcome",
    "aiter_stream",
    "check_params",
    "extract_argument",
    "iter_stream",
    "resolve",
    "serialize_result",
    "to_jsonable",
]
