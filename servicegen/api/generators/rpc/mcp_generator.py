"""
MCP backend: tool schema list + tool-call dispatch module.

Every exposed method becomes a tool named after the method (prefixed with
`@mcp(namespace)` when given). Hidden methods stay callable but are left out
of the advertised tool list.
"""

from servicegen.api.conventions import snake_case
from servicegen.api.extractors.type_mapper import JsonSchemaMapper
from servicegen.api.gen_logging import get_logger

from ..dispatch_generator import build_dispatch_context
from ..schema_utils import (
    collect_records,
    params_schema,
    record_definitions,
)
from ..templating import render_template

logger = get_logger(__name__)


def tool_name(service, method_name):
    namespace = service.option("mcp", "namespace")
    return f"{namespace}_{method_name}" if namespace else method_name


def tool_schema(service, method, op):
    mapper = JsonSchemaMapper([r.name for r in service.records], ref_prefix="#/$defs/")
    schema = params_schema(method.caller_params, mapper)
    refs = [p.type_ref for p in method.caller_params]
    names = collect_records(refs, service)
    if names:
        schema["$defs"] = record_definitions(names, service, mapper)
    description = op.summary or f"Call {method.name}"
    if op.description:
        description = f"{description}\n\n{op.description}"
    return {
        "name": tool_name(service, method.name),
        "description": description,
        "inputSchema": schema,
    }


def build_tools(service):
    """The advertised tool list (documented methods only)."""
    return [tool_schema(service, m, op) for m, op in service.documented()]


def render_mcp(service, settings):
    context = build_dispatch_context(service, key_for=lambda m, op: tool_name(service, m.name))
    code = render_template("rpc/mcp_server.py.jinja", ctx=context, tools=build_tools(service))
    filename = f"{snake_case(service.name)}_mcp.py"
    logger.debug(f"  [MCP] {len(context['methods'])} tools")
    return {filename: code}
