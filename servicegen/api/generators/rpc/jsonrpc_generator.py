"""JSON-RPC 2.0 backend: dispatch module with a FastAPI endpoint (HTTP-RPC style)."""

from servicegen.api.conventions import join_prefix, snake_case
from servicegen.api.gen_logging import get_logger

from ..dispatch_generator import build_dispatch_context
from ..templating import render_template

logger = get_logger(__name__)

RPC_ENDPOINT = "/rpc"


def render_jsonrpc(service, settings):
    context = build_dispatch_context(service)
    endpoint = join_prefix(service.option("http", "prefix"), RPC_ENDPOINT)
    code = render_template("rpc/jsonrpc_server.py.jinja", ctx=context, endpoint=endpoint)
    return {f"{snake_case(service.name)}_jsonrpc.py": code}
