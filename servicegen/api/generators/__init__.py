"""
Backend emitters for servicegen.

Organized into:
- http/: FastAPI router module, combined server and OpenAPI document
- rpc/: JSON-RPC, WebSocket and MCP dispatch modules, OpenRPC and AsyncAPI documents
- docs/: JSON Schema and Markdown reference
- cli/: click command-line module and command tree
- idl/: GraphQL, protobuf (gRPC and Connect), Cap'n Proto, Thrift and Smithy definitions

Every emitter takes (ServiceDescriptor, settings) and returns a mapping of
relative file name -> file content.
"""

from collections import namedtuple

from .cli.cli_generator import render_cli
from .docs.jsonschema_generator import render_jsonschema
from .docs.markdown_generator import render_markdown
from .http.http_generator import render_http
from .http.openapi_generator import render_openapi
from .http.serve_generator import render_serve
from .idl.capnp_generator import render_capnp
from .idl.connect_generator import render_connect
from .idl.graphql_generator import render_graphql
from .idl.grpc_generator import render_grpc
from .idl.smithy_generator import render_smithy
from .idl.thrift_generator import render_thrift
from .rpc.asyncapi_generator import render_asyncapi
from .rpc.jsonrpc_generator import render_jsonrpc
from .rpc.mcp_generator import render_mcp
from .rpc.openrpc_generator import render_openrpc
from .rpc.ws_generator import render_ws

Backend = namedtuple("Backend", ["name", "render", "supports_streaming", "description"])

BACKENDS = {
    b.name: b
    for b in (
        Backend("http", render_http, True, "FastAPI router module (SSE for streams)"),
        Backend("openapi", render_openapi, True, "OpenAPI 3 document"),
        Backend("jsonrpc", render_jsonrpc, False, "JSON-RPC 2.0 dispatch module"),
        Backend("openrpc", render_openrpc, False, "OpenRPC document"),
        Backend("ws", render_ws, True, "WebSocket dispatch module"),
        Backend("asyncapi", render_asyncapi, True, "AsyncAPI document for the WebSocket channel"),
        Backend("serve", render_serve, True, "FastAPI application mounting the http, jsonrpc and ws routers"),
        Backend("mcp", render_mcp, False, "MCP tool list and tool-call dispatch module"),
        Backend("jsonschema", render_jsonschema, False, "JSON Schema of parameters and results"),
        Backend("cli", render_cli, True, "click command-line module and command tree"),
        Backend("graphql", render_graphql, True, "GraphQL SDL"),
        Backend("grpc", render_grpc, True, "Protocol Buffers service definition"),
        Backend("connect", render_connect, True, "Connect (buf) protobuf service and procedure manifest"),
        Backend("capnp", render_capnp, False, "Cap'n Proto schema"),
        Backend("thrift", render_thrift, False, "Thrift IDL"),
        Backend("smithy", render_smithy, False, "Smithy IDL"),
        Backend("markdown", render_markdown, True, "Markdown reference"),
    )
}

__all__ = [
    "Backend",
    "BACKENDS",
    "render_asyncapi",
    "render_capnp",
    "render_cli",
    "render_connect",
    "render_graphql",
    "render_grpc",
    "render_http",
    "render_jsonrpc",
    "render_jsonschema",
    "render_markdown",
    "render_mcp",
    "render_openapi",
    "render_openrpc",
    "render_serve",
    "render_smithy",
    "render_thrift",
    "render_ws",
]
