"""
Serve backend: one FastAPI application over several transports.

Emits the HTTP, JSON-RPC and WebSocket modules (or the subset named by
`@serve(protocols=[...])`) next to `<service>_server.py`, which mounts
their routers and answers `GET /health` (`@serve(health="/status")` moves
it; create_app(health_path=...) overrides it at startup).
"""

from servicegen.api.conventions import snake_case
from servicegen.api.extractors.overrides import SERVE_PROTOCOLS
from servicegen.api.gen_logging import get_logger

from ..rpc.jsonrpc_generator import render_jsonrpc
from ..rpc.ws_generator import render_ws
from ..templating import render_template
from .http_generator import render_http

logger = get_logger(__name__)

HEALTH_PATH = "/health"

RENDERERS = {
    "http": render_http,
    "jsonrpc": render_jsonrpc,
    "ws": render_ws,
}


# protocols that cannot carry lazy sequences
UNARY_ONLY = ("jsonrpc",)


def serve_protocols(service):
    """
    Mounted protocols in canonical order.

    Without @serve(protocols=...) every protocol is mounted, except the
    unary-only ones when the service exposes a streaming method.
    """
    requested = service.option("serve", "protocols")
    if not requested:
        streams = any(m.return_shape.is_streaming for m, _ in service.exposed())
        requested = [p for p in SERVE_PROTOCOLS if not (streams and p in UNARY_ONLY)]
    return [p for p in SERVE_PROTOCOLS if p in requested]


def render_serve(service, settings):
    stem = snake_case(service.name)
    files = {}
    mounts = []
    for protocol in serve_protocols(service):
        rendered = RENDERERS[protocol](service, settings)
        files.update(rendered)
        [module] = [name[:-3] for name in rendered if name.endswith(".py")]
        mounts.append({"module": module, "alias": f"_{protocol}"})

    ctx = {
        "service_name": service.name,
        "protocols": [m["alias"][1:] for m in mounts],
        "mounts": mounts,
        "health_path": service.option("serve", "health", HEALTH_PATH),
    }
    files[f"{stem}_server.py"] = render_template("http/server.py.jinja", ctx=ctx)
    logger.debug(f"  [SERVE] {', '.join(ctx['protocols'])}")
    return files
