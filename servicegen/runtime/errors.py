"""
Runtime dispatch failures.

These are raised by generated dispatch code at request time. Transport
wrappers turn them into failure values: a JSON-RPC error object, an
`{"error": ...}` WebSocket message, or an MCP tool result with isError set.
Codes follow JSON-RPC 2.0.
"""

from typing import Any, Optional

from .error_codes import ErrorCode


class DispatchError(Exception):
    code = -32000

    def __init__(self, message: str, data: Optional[Any] = None):
        self.message = message
        self.data = data
        super().__init__(message)

    def to_dict(self):
        error = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class UnknownMethod(DispatchError):
    code = -32601

    def __init__(self, method: str, available=()):
        self.method = method
        super().__init__(f"Unknown method: {method}", {"available": list(available)} if available else None)


class InvalidParams(DispatchError):
    code = -32602


class AsyncMethodOnSynchronousCaller(DispatchError):
    code = -32603

    def __init__(self, method: str):
        self.method = method
        super().__init__(
            f"Method '{method}' is asynchronous and cannot be called through the synchronous "
            f"dispatch path; use adispatch() instead."
        )


class MethodFailed(DispatchError):
    """
    The method returned a Failure value; `data` holds the serialized error.

    `error_code` is the ErrorCode inferred from the unserialized payload, or
    None; its gRPC status name is appended to the message.
    """

    code = -32000

    def __init__(self, method: str, error: Any, error_code: Optional[ErrorCode] = None):
        self.method = method
        self.error_code = error_code
        message = f"Method '{method}' failed"
        if error_code is not None:
            message = f"{message} ({error_code.grpc_code})"
        super().__init__(message, error)
