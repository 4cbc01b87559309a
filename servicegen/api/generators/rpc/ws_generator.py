"""
WebSocket backend: socket-RPC dispatch module.

Wire protocol, one JSON message per frame:

    -> {"id": 1, "method": "get_user", "params": {"id": "42"}}
    <- {"id": 1, "result": {...}}
    <- {"id": 1, "error": {"code": -32602, "message": "..."}}

Streaming methods answer with one {"id", "item"} message per produced value
followed by {"id", "done": true}.
"""

from servicegen.api.conventions import join_prefix, snake_case

from ..dispatch_generator import build_dispatch_context
from ..templating import render_template

WS_ENDPOINT = "/ws"


def ws_path(service):
    return join_prefix(service.option("http", "prefix"), WS_ENDPOINT)


def render_ws(service, settings):
    context = build_dispatch_context(service)
    code = render_template("rpc/ws_server.py.jinja", ctx=context, endpoint=ws_path(service))
    return {f"{snake_case(service.name)}_ws.py": code}
