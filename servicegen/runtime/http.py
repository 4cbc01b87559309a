"""Response helpers used by generated FastAPI routers."""

import json
from typing import Any, Mapping, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse, Response, StreamingResponse

from .error_codes import http_status_of
from .errors import MethodFailed
from .serialization import aiter_stream, serialize_result, to_jsonable

SSE_MEDIA_TYPE = "text/event-stream"


def build_response(
    method: str,
    shape: str,
    result: Any,
    status_code: int = 200,
    content_type: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Response:
    headers = dict(headers or {})

    if shape == "optional" and result is None:
        raise HTTPException(status_code=404, detail=f"{method}: not found")

    if shape == "unit" and status_code == 204:
        return Response(status_code=204, headers=headers)

    try:
        payload = serialize_result(method, shape, result)
    except MethodFailed as exc:
        return JSONResponse({"error": exc.data}, status_code=http_status_of(exc.error_code), headers=headers)

    if content_type and content_type != "application/json":
        if isinstance(result, (str, bytes)):
            body = result
        else:
            body = json.dumps(payload)
        return Response(content=body, status_code=status_code, media_type=content_type, headers=headers)

    return JSONResponse(payload, status_code=status_code, headers=headers)


async def _sse_events(result):
    async for item in aiter_stream(result):
        yield f"data: {json.dumps(item)}\n\n"


def stream_response(result: Any, headers: Optional[Mapping[str, str]] = None) -> StreamingResponse:
    """Server-sent events, one `data:` line per produced item."""
    return StreamingResponse(_sse_events(result), media_type=SSE_MEDIA_TYPE, headers=dict(headers or {}))


__all__ = ["build_response", "stream_response", "to_jsonable"]
